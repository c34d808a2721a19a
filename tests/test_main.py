"""Tests for the command-line entry point."""

from pathlib import Path

import pytest

from zod_schema_compiler.__main__ import build_parser, main

DEFINITIONS = """
schemas:
  - class: App.Data.AddressData
    rules:
      city: required|string
  - class: App.Http.Requests.StoreOrderRequest
    type: request
    rules:
      quantity: required|integer|min:1
"""


@pytest.fixture
def definitions(tmp_path: Path) -> Path:
    path = tmp_path / "schemas.yml"
    path.write_text(DEFINITIONS)
    return path


class TestMain:
    """CLI output routing and exit codes."""

    def test_parser(self) -> None:
        args = build_parser().parse_args(["defs.yml", "-o", "out.ts", "--separate-files"])
        assert args.definitions == "defs.yml"
        assert args.output == "out.ts"
        assert args.separate_files
        assert args.config is None

    def test_prints_to_stdout(self, definitions: Path, capsys: pytest.CaptureFixture) -> None:
        assert main([str(definitions)]) == 0

        out = capsys.readouterr().out
        assert out.startswith("import { z } from 'zod';")
        assert "export const AddressDataSchema = z.object({" in out
        assert "export const StoreOrderRequestSchema = z.object({" in out

    def test_writes_output_file(self, definitions: Path, tmp_path: Path) -> None:
        target = tmp_path / "generated" / "schemas.ts"
        assert main([str(definitions), "-o", str(target)]) == 0
        assert "StoreOrderRequestSchema" in target.read_text(encoding="utf-8")

    def test_separate_files(self, definitions: Path, tmp_path: Path) -> None:
        target = tmp_path / "schemas"
        assert main([str(definitions), "-o", str(target), "--separate-files"]) == 0
        assert sorted(p.name for p in target.iterdir()) == [
            "AddressDataSchema.ts",
            "StoreOrderRequestSchema.ts",
        ]

    def test_config_file(
        self, definitions: Path, tmp_path: Path, capsys: pytest.CaptureFixture
    ) -> None:
        config = tmp_path / "config.yml"
        config.write_text("output:\n  format: namespace\n  namespace: Forms\n")

        assert main([str(definitions), "-c", str(config)]) == 0
        assert "export namespace Forms {" in capsys.readouterr().out

    def test_missing_definitions(self, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        assert main([str(tmp_path / "missing.yml")]) == 1
        assert "Error: Failed to load configuration from" in capsys.readouterr().err

    def test_invalid_log_level(
        self,
        definitions: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture,
    ) -> None:
        monkeypatch.setenv("ZOD_SCHEMA_LOG_LEVEL", "LOUD")
        assert main([str(definitions)]) == 0
        assert "Invalid ZOD_SCHEMA_LOG_LEVEL 'LOUD'" in capsys.readouterr().err
