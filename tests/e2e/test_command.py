"""sweetshop 커맨드 실행 테스트."""
from __future__ import annotations

import pytest

from sweetshop.command import SweetShopCommand, SweetShopCommandParser
from sweetshop.config import TestConfig
from sweetshop.domain import Role
from sweetshop.schema import Login
from tests import FileDbConfig


@pytest.fixture
def config(tmp_path) -> FileDbConfig:
    return FileDbConfig(db_path=str(tmp_path / "shop.db"))


@pytest.fixture
def cmd(config: FileDbConfig) -> SweetShopCommand:
    return SweetShopCommand(config)


@pytest.fixture
def parser(cmd: SweetShopCommand) -> SweetShopCommandParser:
    return SweetShopCommandParser(cmd)


def test_no_args_prints_help(parser: SweetShopCommandParser, capsys):
    assert parser.parse_args([]) == 0
    assert "usage: sweetshop" in capsys.readouterr().out


def test_info(parser: SweetShopCommandParser, config: FileDbConfig, capsys):
    assert parser.parse_args(["info"]) == 0
    out = capsys.readouterr().out
    assert config.title in out
    assert "shop.db" in out


def test_init_db(parser: SweetShopCommandParser, config: FileDbConfig, tmp_path):
    assert parser.parse_args(["init-db", "--drop"]) == 0
    assert (tmp_path / "shop.db").exists()


def test_create_admin_user(parser: SweetShopCommandParser, cmd: SweetShopCommand):
    args = ["create-user", "boss@example.com", "secret123", "--name", "Boss", "--admin"]
    assert parser.parse_args(args) == 0

    login = Login(email="boss@example.com", password="secret123")
    user = cmd.shop.users.login(login).unwrap()["user"]
    assert user.role == Role.ADMIN
    assert user.name == "Boss"


def test_create_user_twice(parser: SweetShopCommandParser, capsys):
    args = ["create-user", "kim@example.com", "secret123"]
    assert parser.parse_args(args) == 0
    assert parser.parse_args(args) == 1
    assert "User already exists" in capsys.readouterr().err


def test_create_user_with_invalid_input(parser: SweetShopCommandParser, capsys):
    assert parser.parse_args(["create-user", "not-an-email", "123"]) == 1
    err = capsys.readouterr().err
    assert "email:" in err
    assert "password:" in err


def test_seed_is_idempotent(
    parser: SweetShopCommandParser, cmd: SweetShopCommand, capsys
):
    assert parser.parse_args(["seed"]) == 0
    assert capsys.readouterr().out.count("created:") == 4

    assert parser.parse_args(["seed"]) == 0
    assert capsys.readouterr().out.count("skipped:") == 4

    names = [it.name for it in cmd.shop.catalog.list().unwrap()]
    assert sorted(names) == ["Chocolate Truffle", "Strawberry Gummy", "Vanilla Fudge"]
    admin = cmd.shop.users.login(Login(email="admin@example.com", password="admin123"))
    assert admin.unwrap()["user"].role == Role.ADMIN


def test_run_dry_run(cmd: SweetShopCommand, capsys):
    cmd.run(port=4000, dry_run=True)
    assert ":4000" in capsys.readouterr().out


def test_run_refuses_memory_db(capsys):
    parser = SweetShopCommandParser(SweetShopCommand(TestConfig()))
    assert parser.parse_args(["run"]) == 1
    assert "in-memory database" in capsys.readouterr().err
