#!/usr/bin/env python3
"""Tests for validate_yaml schema validation."""

from pathlib import Path

from validate_yaml import load_schema, main, validate_garage_file

EXAMPLE = Path(__file__).parent.parent / "garages" / "example.yaml"

VALID_MINIMAL = """
user: u1
vehicles:
  - id: clio
    brand: Renault
    model: Clio
    year: 2019
    licensePlate: 215 TU 4821
    fuelType: Essence
maintenance:
  - id: m1
    vehicleId: clio
    date: '2025-02-14'
    task: Vidange
    nextDueMileage: 49800
"""


class TestLoadSchema:
    """Tests for load_schema function."""

    def test_returns_dict(self):
        assert isinstance(load_schema(), dict)

    def test_has_expected_structure(self):
        properties = load_schema()["properties"]
        for key in ("user", "vehicles", "repairs", "maintenance", "fuelLogs"):
            assert key in properties


class TestValidateGarageFile:
    """Tests for validate_garage_file function."""

    def test_valid_minimal_returns_no_errors(self, tmp_path):
        path = tmp_path / "valid.yaml"
        path.write_text(VALID_MINIMAL)
        assert validate_garage_file(path, load_schema()) == []

    def test_example_file_is_valid(self):
        assert validate_garage_file(EXAMPLE, load_schema()) == []

    def test_missing_required_field(self, tmp_path):
        path = tmp_path / "invalid.yaml"
        path.write_text(VALID_MINIMAL.replace("    licensePlate: 215 TU 4821\n", ""))
        errors = validate_garage_file(path, load_schema())
        assert any("Schema validation" in e for e in errors)

    def test_unknown_fuel_type(self, tmp_path):
        path = tmp_path / "invalid.yaml"
        path.write_text(VALID_MINIMAL.replace("fuelType: Essence", "fuelType: GPL"))
        errors = validate_garage_file(path, load_schema())
        assert errors
        assert any("vehicles.0.fuelType" in e for e in errors)

    def test_negative_due_mileage(self, tmp_path):
        path = tmp_path / "invalid.yaml"
        path.write_text(VALID_MINIMAL.replace("nextDueMileage: 49800", "nextDueMileage: -1"))
        assert validate_garage_file(path, load_schema())

    def test_unknown_vehicle_reference(self, tmp_path):
        path = tmp_path / "invalid.yaml"
        path.write_text(VALID_MINIMAL.replace("vehicleId: clio", "vehicleId: ghost"))
        errors = validate_garage_file(path, load_schema())
        assert errors == ["Unknown vehicle 'ghost' at path: maintenance.0"]

    def test_invalid_yaml_returns_parse_error(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("user: u1\nvehicles: [unclosed\n")
        errors = validate_garage_file(path, load_schema())
        assert any("YAML" in e for e in errors)

    def test_nonexistent_file_returns_errors(self, tmp_path):
        errors = validate_garage_file(tmp_path / "does_not_exist.yaml", load_schema())
        assert any(e.startswith("Error") for e in errors)


class TestMain:
    """Tests for the validate_yaml entry point."""

    def test_reports_ok(self, tmp_path, capsys):
        path = tmp_path / "valid.yaml"
        path.write_text(VALID_MINIMAL)
        assert main([str(path)]) == 0
        assert "OK: valid.yaml" in capsys.readouterr().out

    def test_reports_failure(self, tmp_path, capsys):
        path = tmp_path / "bad.yaml"
        path.write_text("user: 1\n")
        assert main([str(path)]) == 1
        assert "FAIL: bad.yaml" in capsys.readouterr().out
