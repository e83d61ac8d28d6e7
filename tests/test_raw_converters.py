"""Tests for the RAW converter strategies (external tools are mocked)."""

import os
import subprocess

import pytest

from core.artifacts import TempArtifacts
from core.errors import ConversionOutputMissing, RawConversionFailed, UnsupportedPlatform
from core.raw_converters import (
    DcrawConverter,
    SipsConverter,
    UnsupportedPlatformConverter,
    select_converter,
)


class FakeRun:
    """Stands in for subprocess.run and records every command."""

    def __init__(self, produce=None, error=None):
        self.produce = produce
        self.error = error
        self.commands = []

    def __call__(self, cmd, **kwargs):
        self.commands.append(cmd)
        if self.error is not None:
            raise self.error
        if self.produce is not None:
            path = self.produce(cmd)
            if path:
                with open(path, "wb") as f:
                    f.write(b"converted")
        return subprocess.CompletedProcess(cmd, 0, "", "")


def _sips_output(cmd):
    return cmd[cmd.index("--out") + 1]


def _dcraw_output(cmd):
    return os.path.splitext(cmd[-1])[0] + ".tiff"


@pytest.mark.parametrize("platform, converter_type", [
    ("darwin", SipsConverter),
    ("win32", DcrawConverter),
    ("linux", DcrawConverter),
    ("sunos5", UnsupportedPlatformConverter),
])
def test_select_converter(platform, converter_type):
    converter = select_converter(platform)
    assert isinstance(converter, converter_type)
    assert converter.platform == platform


class TestSipsConverter:

    def test_converts_to_jpeg(self, raw_file, monkeypatch):
        fake = FakeRun(produce=_sips_output)
        monkeypatch.setattr(subprocess, "run", fake)

        with TempArtifacts() as artifacts:
            output = SipsConverter("darwin").convert(raw_file, artifacts)

            assert os.path.exists(output)
            assert output.endswith(".jpg")
            assert artifacts.paths == [output]
            assert fake.commands == [["sips", "-s", "format", "jpeg", raw_file, "--out", output]]
        assert not os.path.exists(output)

    def test_max_dimension_adds_resample_flag(self, raw_file, monkeypatch):
        fake = FakeRun(produce=_sips_output)
        monkeypatch.setattr(subprocess, "run", fake)

        with TempArtifacts() as artifacts:
            SipsConverter("darwin").convert(raw_file, artifacts, max_dimension=800)

        cmd = fake.commands[0]
        assert cmd[cmd.index("-Z") + 1] == "800"

    def test_tool_failure(self, raw_file, monkeypatch):
        error = subprocess.CalledProcessError(1, ["sips"], output="", stderr="Error: cannot read")
        monkeypatch.setattr(subprocess, "run", FakeRun(error=error))

        with TempArtifacts() as artifacts:
            with pytest.raises(RawConversionFailed, match="sips") as exc_info:
                SipsConverter("darwin").convert(raw_file, artifacts)

        assert exc_info.value.platform == "darwin"
        assert "cannot read" in str(exc_info.value)


class TestDcrawConverter:

    def test_converts_copy_to_tiff(self, raw_file, monkeypatch):
        fake = FakeRun(produce=_dcraw_output)
        monkeypatch.setattr(subprocess, "run", fake)

        with TempArtifacts() as artifacts:
            output = DcrawConverter("win32").convert(raw_file, artifacts)
            temp_input = fake.commands[0][-1]

            assert fake.commands[0][:4] == ["dcraw", "-w", "-T", "-6"]
            assert temp_input != raw_file
            assert temp_input.endswith(".orf")
            assert os.path.exists(temp_input)
            assert output == os.path.splitext(temp_input)[0] + ".tiff"
            assert set(artifacts.paths) == {temp_input, output}

        assert not os.path.exists(temp_input)
        assert not os.path.exists(output)
        # the user's file is never touched
        assert os.path.exists(raw_file)

    def test_missing_output(self, raw_file, monkeypatch):
        fake = FakeRun()
        monkeypatch.setattr(subprocess, "run", fake)

        with TempArtifacts() as artifacts:
            with pytest.raises(ConversionOutputMissing) as exc_info:
                DcrawConverter("win32").convert(raw_file, artifacts)
            temp_input = fake.commands[0][-1]

        assert exc_info.value.expected_path.endswith(".tiff")
        assert not os.path.exists(temp_input)

    def test_tool_not_installed(self, raw_file, monkeypatch):
        monkeypatch.setattr(subprocess, "run", FakeRun(error=FileNotFoundError("dcraw")))

        with TempArtifacts() as artifacts:
            with pytest.raises(RawConversionFailed) as exc_info:
                DcrawConverter("linux").convert(raw_file, artifacts)
            leftovers = artifacts.paths

        assert exc_info.value.tool == "dcraw"
        assert exc_info.value.platform == "linux"
        assert not any(os.path.exists(p) for p in leftovers)

    def test_timeout(self, raw_file, monkeypatch):
        monkeypatch.setattr(subprocess, "run", FakeRun(error=subprocess.TimeoutExpired(["dcraw"], 120)))

        with TempArtifacts() as artifacts:
            with pytest.raises(RawConversionFailed, match="timed out"):
                DcrawConverter("win32").convert(raw_file, artifacts)

    def test_custom_binary(self, raw_file, monkeypatch):
        fake = FakeRun(produce=_dcraw_output)
        monkeypatch.setattr(subprocess, "run", fake)

        converter = DcrawConverter("linux", binary="/opt/bin/dcraw")
        with TempArtifacts() as artifacts:
            converter.convert(raw_file, artifacts)

        assert fake.commands[0][0] == "/opt/bin/dcraw"
        assert converter.get_tool_name() == "dcraw"


def test_unsupported_platform_creates_nothing(raw_file, monkeypatch):
    fake = FakeRun()
    monkeypatch.setattr(subprocess, "run", fake)

    with TempArtifacts() as artifacts:
        with pytest.raises(UnsupportedPlatform, match="sunos5") as exc_info:
            select_converter("sunos5").convert(raw_file, artifacts)
        assert artifacts.paths == []

    assert exc_info.value.platform == "sunos5"
    assert fake.commands == []
