#!/usr/bin/env python3
"""Validate garage YAML files against the schema."""
import sys
from pathlib import Path

import yaml
from jsonschema import validate, ValidationError


def load_schema() -> dict:
    """Load the JSON schema from schema.yaml."""
    schema_path = Path(__file__).parent / "schema.yaml"
    with open(schema_path) as f:
        return yaml.safe_load(f)


def validate_garage_file(filepath: Path, schema: dict) -> list[str]:
    """Validate a single garage YAML file. Returns list of errors."""
    errors = []
    try:
        with open(filepath) as f:
            data = yaml.safe_load(f)
        validate(instance=data, schema=schema)
    except yaml.YAMLError as e:
        errors.append(f"YAML parse error: {e}")
    except ValidationError as e:
        errors.append(f"Schema validation error: {e.message}")
        if e.path:
            errors.append(f"  at path: {'.'.join(str(p) for p in e.path)}")
    except OSError as e:
        errors.append(f"Error: {e}")
    else:
        errors.extend(check_references(data))
    return errors


def check_references(data: dict) -> list[str]:
    """Every history entry must point at a known vehicle."""
    errors = []
    vehicle_ids = {v["id"] for v in data.get("vehicles") or []}
    for section in ("repairs", "maintenance", "fuelLogs"):
        for i, entry in enumerate(data.get(section) or []):
            if entry["vehicleId"] not in vehicle_ids:
                errors.append(
                    f"Unknown vehicle '{entry['vehicleId']}' at path: {section}.{i}"
                )
    return errors


def main(argv=None):
    """Validate the given garage files (default: every YAML file in garages/)."""
    schema = load_schema()
    args = sys.argv[1:] if argv is None else argv

    if args:
        yaml_files = [Path(a) for a in args]
    else:
        garages_dir = Path(__file__).parent / "garages"
        if not garages_dir.exists():
            print(f"Error: garages directory not found: {garages_dir}")
            return 1
        yaml_files = list(garages_dir.glob("*.yaml")) + list(garages_dir.glob("*.yml"))

    if not yaml_files:
        print("Warning: No YAML files found")
        return 0

    all_valid = True
    for filepath in sorted(yaml_files):
        errors = validate_garage_file(filepath, schema)
        if errors:
            print(f"FAIL: {filepath.name}")
            for error in errors:
                print(f"  {error}")
            all_valid = False
        else:
            print(f"OK: {filepath.name}")

    return 0 if all_valid else 1


if __name__ == "__main__":
    sys.exit(main())
