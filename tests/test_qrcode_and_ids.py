from __future__ import annotations

import threading

from bizcard_pptx.models import Record
from bizcard_pptx.qrcode_image import build_vcard, generate_qr_code
from bizcard_pptx.shape_ids import ShapeIdAllocator


def test_vcard_lists_populated_fields_only() -> None:
    record = Record(
        name="Ann Lee",
        company="Acme",
        email="ann@acme.test",
        mobile="010-1234-5678",
        custom_fields={"LinkedIn": "https://linkedin.com/in/ann", "Hobby": "chess"},
    )

    lines = build_vcard(record).split("\r\n")

    assert lines[:2] == ["BEGIN:VCARD", "VERSION:3.0"]
    assert "FN:Ann Lee" in lines
    assert "ORG:Acme" in lines
    assert "EMAIL;TYPE=WORK:ann@acme.test" in lines
    assert "TEL;TYPE=CELL:010-1234-5678" in lines
    assert "URL:https://linkedin.com/in/ann" in lines
    assert "NOTE:hobby: chess" in lines
    assert not any(line.startswith("TEL;TYPE=FAX") for line in lines)
    assert lines[-2:] == ["END:VCARD", ""]


def test_qr_code_is_png() -> None:
    data = generate_qr_code(Record(name="Ann", email="ann@acme.test"))
    assert data.startswith(b"\x89PNG\r\n\x1a\n")


def test_allocator_starts_after_seed() -> None:
    allocator = ShapeIdAllocator(start=1000)
    assert allocator.next_id() == 1001
    assert allocator.current == 1001


def test_allocator_ids_unique_across_threads() -> None:
    allocator = ShapeIdAllocator()
    seen: list[int] = []
    lock = threading.Lock()

    def worker() -> None:
        ids = [allocator.next_id() for _ in range(200)]
        with lock:
            seen.extend(ids)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(seen) == len(set(seen)) == 1600
    assert allocator.current == 1000 + 1600
