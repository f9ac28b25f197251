"""Build-time JSON Schema generation script for search-index-registry models."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from search_index_registry.schemas import generate_all_schemas, schema_to_json


def write_all_schemas(
    schemas: Dict[str, Dict[str, Any]], output_dir: Path
) -> List[Path]:
    """Write all schemas to *output_dir* as ``{name}.schema.json`` files.

    Returns:
        Paths of the written files.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    written: List[Path] = []
    for name, schema in schemas.items():
        path = output_dir / f"{name}.schema.json"
        path.write_text(schema_to_json(schema), encoding="utf-8")
        print(f"Generated {path}")
        written.append(path)
    return written


def check_drift(output_dir: Path) -> int:
    """Check if generated schemas match the files in *output_dir*.

    Returns:
        0 if all schemas match, 1 if any drift detected
    """
    schemas = generate_all_schemas()
    drift_detected = False

    for name, schema in schemas.items():
        path = output_dir / f"{name}.schema.json"
        expected_content = schema_to_json(schema)

        if not path.exists():
            print(f"ERROR: Missing schema file: {path}", file=sys.stderr)
            drift_detected = True
            continue

        actual_content = path.read_text(encoding="utf-8")
        if actual_content != expected_content:
            print(f"ERROR: Schema drift detected in {path}", file=sys.stderr)
            drift_detected = True

    # Orphaned schema files not in the registry
    expected_files = {f"{name}.schema.json" for name in schemas}
    actual_files = {p.name for p in output_dir.glob("*.schema.json")}
    for orphan in sorted(actual_files - expected_files):
        print(f"Orphaned schema {orphan}", file=sys.stderr)
        drift_detected = True

    if drift_detected:
        print("\nSchema drift detected. Run without --check to regenerate.", file=sys.stderr)
        return 1

    print(f"All {len(schemas)} schemas are up to date.")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for schema generation script.

    Returns:
        Exit code (0 for success, 1 for failure/drift)
    """
    parser = argparse.ArgumentParser(
        description="Generate JSON schemas for search-index-registry models"
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("schemas"),
        help="Directory holding the .schema.json files (default: ./schemas)",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Check for schema drift without writing files (CI mode)",
    )
    args = parser.parse_args(argv)

    if args.check:
        return check_drift(args.output_dir)

    schemas = generate_all_schemas()
    write_all_schemas(schemas, args.output_dir)
    print(f"\nSuccessfully generated {len(schemas)} schemas.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
