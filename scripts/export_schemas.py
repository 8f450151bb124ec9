"""Export JSON schemas for the API's domain models."""

import json
from pathlib import Path

from pydantic import BaseModel

from pdfchat.models import ChatMessage, SessionSummary, UserDocument

SCHEMA_MODELS: list[type[BaseModel]] = [UserDocument, ChatMessage, SessionSummary]


def main() -> None:
    """Export schemas to docs/schemas/."""
    schemas_dir = Path("docs/schemas")
    schemas_dir.mkdir(parents=True, exist_ok=True)

    for model in SCHEMA_MODELS:
        schema_path = schemas_dir / f"{model.__name__}.schema.json"
        with open(schema_path, "w") as f:
            json.dump(model.model_json_schema(), f, indent=2)
        print(f"Exported {model.__name__} schema to {schema_path}")


if __name__ == "__main__":
    main()
