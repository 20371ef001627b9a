import json
from pathlib import Path

from scripts.gen_schemas import main


def test_gen_schemas_writes_one_file_per_model(tmp_path: Path):
    """
    @brief
    Schemas are generated for the three sheets, findings and config.

    @details
    Sheet schemas use column names as property names.
    """
    # --- Act ---
    written = main([str(tmp_path)])

    # --- Assert ---
    assert sorted(p.name for p in written) == [
        "clients.schema.json",
        "config.schema.json",
        "finding.schema.json",
        "tasks.schema.json",
        "workers.schema.json",
    ]
    workers = json.loads((tmp_path / "workers.schema.json").read_text(encoding="utf-8"))
    assert "AvailableSlots" in workers["properties"]
