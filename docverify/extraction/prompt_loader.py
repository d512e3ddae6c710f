from pathlib import Path

from docverify.extraction.exceptions import FieldExtractionError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"


def load_prompt_template(path: Path | None = None) -> str:
    """Load the field extraction prompt template from a file.

    Args:
        path: Path to the prompt template file.
              Defaults to the bundled field_extraction_prompt.txt.

    Raises:
        FieldExtractionError: if the file cannot be read.
    """
    if path is None:
        path = _DEFAULT_PROMPT_DIR / "field_extraction_prompt.txt"
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise FieldExtractionError(f"Failed to load prompt template: {exc}") from exc


def load_json_schema(path: Path | None = None) -> str:
    """Load the JSON schema the provider must answer with.

    Raises:
        FieldExtractionError: if the file cannot be read.
    """
    if path is None:
        path = _DEFAULT_PROMPT_DIR / "field_extraction_schema.json"
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise FieldExtractionError(f"Failed to load JSON schema: {exc}") from exc
