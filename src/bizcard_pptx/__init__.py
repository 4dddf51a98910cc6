"""Business card PowerPoint generator package."""

from .errors import (
    ErrorCode,
    BizCardError,
    TemplateValidationError,
    RecordImportError,
    RecordValidationError,
    CardGenerationError,
    format_error,
)
from .models import (
    Record,
    RecordOutcome,
    BatchResult,
    ImportResult,
)
from .config import (
    Config,
    ProcessingOptions,
)
from .placeholder_resolver import (
    FormattingPolicy,
    resolve,
    substitute_text,
)
from .line_removal import should_remove
from .shape_ids import ShapeIdAllocator
from .substitution import (
    MergeContext,
    process_presentation,
)
from .images import insert_image_shape
from .layout import widen_name_shape
from .generator import (
    CardGenerator,
    generate_batch,
)
from .qrcode_image import (
    build_vcard,
    generate_qr_code,
)
from .importer import (
    import_records,
    create_import_template,
    load_records_yaml,
)
from .templates import (
    create_basic_template,
    create_qrcode_template,
)

__all__ = [
    # Errors
    "ErrorCode",
    "BizCardError",
    "TemplateValidationError",
    "RecordImportError",
    "RecordValidationError",
    "CardGenerationError",
    "format_error",
    # Data model
    "Record",
    "RecordOutcome",
    "BatchResult",
    "ImportResult",
    # Configuration
    "Config",
    "ProcessingOptions",
    # Placeholder resolution
    "FormattingPolicy",
    "resolve",
    "substitute_text",
    "should_remove",
    # Merge engine
    "ShapeIdAllocator",
    "MergeContext",
    "process_presentation",
    "insert_image_shape",
    "widen_name_shape",
    # Batch generation
    "CardGenerator",
    "generate_batch",
    # QR codes
    "build_vcard",
    "generate_qr_code",
    # Ingestion and samples
    "import_records",
    "create_import_template",
    "load_records_yaml",
    "create_basic_template",
    "create_qrcode_template",
]
