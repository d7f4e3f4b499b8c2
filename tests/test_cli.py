from click.testing import CliRunner

import s7ua.__main__
from s7ua import __version__
from s7ua.__main__ import main
from s7ua.client import S7UaClient

from fakes import FakeSession, build_test_db


def test_help():
    result = CliRunner().invoke(main, ["--help"])
    assert result.exit_code == 0
    assert "ENDPOINT" in result.output


def test_version():
    result = CliRunner().invoke(main, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_invalid_sessions():
    result = CliRunner().invoke(main, ["opc.tcp://plc:4840", "--sessions", "0"])
    assert result.exit_code == 2


def test_browse(monkeypatch):
    plc = FakeSession()
    build_test_db(plc)

    async def factory(config, endpoint):
        return plc

    monkeypatch.setattr(s7ua.__main__, "S7UaClient", lambda config: S7UaClient(config, session_factory=factory))

    result = CliRunner().invoke(main, ["opc.tcp://plc:4840", "--sessions", "1"])

    assert result.exit_code == 0
    assert "DataBlocksGlobal.Db.Speed = 1200 [Good]" in result.output
    assert "DataBlocksGlobal.Db.TestStruct.TestStructInt = 12341 [Good]" in result.output
    assert "DataBlocksGlobal.Db.TestStruct =" not in result.output
    assert plc.closed


def test_connection_refused(monkeypatch):
    async def factory(config, endpoint):
        raise OSError("connection refused")

    monkeypatch.setattr(s7ua.__main__, "S7UaClient", lambda config: S7UaClient(config, session_factory=factory))

    result = CliRunner().invoke(main, ["opc.tcp://plc:4840"])

    assert result.exit_code == 1
