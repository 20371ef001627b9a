# scripts/gen_schemas.py
"""
Generate JSON Schemas for the allocprep sheet and config models.

One schema per uploaded sheet (clients, workers, tasks), plus the finding
shape used in validation_report.json and the runtime config.

Output directory: schemas/ (or the first command-line argument)
"""

import json
import sys
from pathlib import Path

from pydantic import BaseModel

from allocprep.schemas.models import RECORD_TYPES, AppConfig, Finding


def export_schema(model_cls: type[BaseModel], name: str, out_dir: Path) -> Path:
    """
    @brief
    Writes the JSON schema of one pydantic model to "<name>.schema.json".

    @details
    Record schemas use column names (aliases) as property names, so they
    describe the sheet exactly as users upload it.

    @returns
        Path of the written schema file.
    """
    out_dir.mkdir(parents=True, exist_ok=True)
    schema_path = (out_dir / f"{name}.schema.json").resolve()
    schema = model_cls.model_json_schema(by_alias=True)

    with schema_path.open("w", encoding="utf-8") as f:
        json.dump(schema, f, indent=2, ensure_ascii=False)
        f.write("\n")

    try:
        rel = schema_path.relative_to(Path.cwd())
    except ValueError:
        rel = schema_path
    print(f"✅  Generated {rel}")
    return schema_path


def main(argv: list[str] | None = None) -> list[Path]:
    args = sys.argv[1:] if argv is None else argv
    out_dir = Path(args[0] if args else "schemas").resolve()

    written = [export_schema(model, entity, out_dir) for entity, model in RECORD_TYPES.items()]
    written.append(export_schema(Finding, "finding", out_dir))
    written.append(export_schema(AppConfig, "config", out_dir))
    return written


if __name__ == "__main__":
    main()
