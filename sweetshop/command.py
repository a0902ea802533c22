"""Command line script for Sweet Shop.

사용 예::

    $ sweetshop init-db
    $ sweetshop create-user admin@example.com admin123 --admin
    $ sweetshop run --port 8000
"""
import os
import shutil
import sys
from argparse import ArgumentParser, Namespace
from decimal import Decimal
from typing import Callable, Optional, Sequence

import uvicorn
from sqlalchemy.engine import make_url

from sweetshop.bootstrap import SweetShopApp, bootstrap
from sweetshop.config import SweetShop, get_config
from sweetshop.core import ErrorKind, Result
from sweetshop.domain import Role
from sweetshop.logging import get_logger
from sweetshop.orm import init_db, metadata
from sweetshop.schema import SweetCreate, UserCreate, validate
from sweetshop.utils import Fore, bold, fg

SEED_ADMIN = ("admin@example.com", "admin123", "Admin User")
SEED_SWEETS = [
    ("Chocolate Truffle", "Chocolate", "2.99", 50),
    ("Strawberry Gummy", "Gummy", "1.49", 100),
    ("Vanilla Fudge", "Fudge", "3.99", 25),
]

logger = get_logger("sweetshop.command")


class CommandError(Exception):
    """커맨드를 실행할 수 없을 때 발생합니다."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class SweetShopCommand:
    """콘솔 명령어의 실제 동작."""

    def __init__(self, config: Optional[SweetShop] = None):
        self.config = config or get_config()
        self._shop: Optional[SweetShopApp] = None

    @property
    def shop(self) -> SweetShopApp:
        """명령어를 처음 실행할 때 앱을 조립합니다."""
        if self._shop is None:
            self._shop = bootstrap(self.config)
        return self._shop

    def warn(self, msg: str):
        print(bold("WARNING:", Fore.YELLOW), msg)

    def headline(self, text: str, icon: str = ""):
        rule = "━" * min(72, shutil.get_terminal_size().columns)
        if icon and os.name != "nt":
            text = f"{icon} {text}"
        print(rule, text, rule, sep="\n")

    def info(self):
        db_url = make_url(self.config.get_db_url()).render_as_string(hide_password=True)
        rows = [
            ("Name", self.config.name),
            ("Title", self.config.title),
            ("API", self.config.get_api_url()),
            ("DB", db_url),
        ]
        self.headline(bold("Sweet Shop Information"), icon="💡")
        for label, value in rows:
            print(f" {fg(label.ljust(6), Fore.CYAN)}{fg(value, Fore.LIGHTWHITE_EX)}")

    def init_db(self, drop=False):
        if drop:
            self.warn(f"dropping {bold('all tables')} first")
        init_db(self.config, drop_all=drop)
        logger.info("database ready: %d tables", len(metadata.tables))

    def create_user(
        self,
        email: str,
        password: str,
        name: Optional[str] = None,
        admin=False,
    ):
        """관리자 계정은 이 명령어로만 만들 수 있습니다."""
        role = Role.ADMIN if admin else Role.USER
        validated = validate(
            UserCreate, {"email": email, "password": password, "name": name}
        )
        if not validated.ok:
            raise CommandError("; ".join(validated.details))

        data = validated.value
        result = self.shop.users.create_user(data.email, data.password, data.name, role)
        if not result.ok:
            raise CommandError(result.message)
        print(bold("created:", Fore.GREEN), f"{result.value.email} ({role.value})")

    def seed(self):
        """관리자 계정과 예제 품목을 등록합니다. 이미 있는 레코드는 건너뜁니다."""
        email, password, name = SEED_ADMIN
        result = self.shop.users.create_user(email, password, name, Role.ADMIN)
        self._report(email, result)

        for sweet_name, category, price, quantity in SEED_SWEETS:
            data = SweetCreate(
                name=sweet_name,
                category=category,
                price=Decimal(price),
                quantity=quantity,
            )
            self._report(sweet_name, self.shop.catalog.create(data))

    def _report(self, label: str, result: Result):
        if result.ok:
            print(bold("created:", Fore.GREEN), label)
        elif result.kind == ErrorKind.CONFLICT:
            print(bold("skipped:", Fore.YELLOW), label, "already exists")
        else:
            raise CommandError(f"{label}: {result.message}")

    def run(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        reload=False,
        dry_run=False,
    ):
        """API 서버를 실행합니다. 메모리 DB 설정으로는 실행하지 않습니다."""
        if self.config.is_memory_db():
            raise CommandError(
                "in-memory database cannot be shared by server threads;"
                " set SWEETSHOP_DB_URL to a file or server database"
            )
        host = host or self.config.get_api_host()
        port = port or self.config.get_api_port()
        self.headline(
            bold("Launching ", Fore.CYAN)
            + bold(self.config.title, Fore.WHITE)
            + fg(f" at http://{host}:{port}", Fore.LIGHTWHITE_EX),
            icon="🚀",
        )
        if dry_run:
            return

        uvicorn.run(
            "sweetshop.api:create_app",
            factory=True,
            host=host,
            port=port,
            reload=reload,
        )


class SweetShopCommandParser:
    """argparse 서브커맨드를 `SweetShopCommand` 메소드에 연결합니다."""

    def __init__(self, cmd: Optional[SweetShopCommand] = None):
        self._cmd = cmd or SweetShopCommand()
        self.parser = ArgumentParser(
            "sweetshop",
            description=f"🍬 {bold('Sweet Shop')} {fg('management commands', Fore.CYAN)}",
        )
        sub = self.parser.add_subparsers(dest="command")

        sub.add_parser("info", help="설정 정보 출력").set_defaults(
            func=lambda ns: self._cmd.info()
        )

        p = sub.add_parser("init-db", help="데이터베이스 테이블 생성")
        p.add_argument(
            "--drop", action="store_true", help="기존 테이블을 지우고 다시 생성"
        )
        p.set_defaults(func=lambda ns: self._cmd.init_db(drop=ns.drop))

        p = sub.add_parser("create-user", help="사용자 계정 생성")
        p.add_argument("email")
        p.add_argument("password")
        p.add_argument("--name", help="사용자 이름")
        p.add_argument("--admin", action="store_true", help="관리자 계정으로 생성")
        p.set_defaults(func=self._create_user)

        sub.add_parser("seed", help="관리자 계정과 예제 품목 등록").set_defaults(
            func=lambda ns: self._cmd.seed()
        )

        p = sub.add_parser("run", help="API 서버 실행")
        p.add_argument("--host", help="서버 주소")
        p.add_argument("--port", type=int, help="서버 포트")
        p.add_argument("--reload", action="store_true", help="코드 변경시 자동 재시작")
        p.set_defaults(
            func=lambda ns: self._cmd.run(host=ns.host, port=ns.port, reload=ns.reload)
        )

    def _create_user(self, ns: Namespace):
        self._cmd.create_user(ns.email, ns.password, name=ns.name, admin=ns.admin)

    def parse_args(self, args: Sequence[str]) -> int:
        """명령어를 실행하고 프로세스 종료 코드를 리턴합니다."""
        ns = self.parser.parse_args(args)
        func: Optional[Callable[[Namespace], None]] = getattr(ns, "func", None)
        if func is None:
            self.parser.print_help()
            return 0

        try:
            func(ns)
        except CommandError as e:
            print(bold("ERROR:", Fore.RED), fg(e.message, Fore.YELLOW), file=sys.stderr)
            return 1
        return 0


def console_main():
    sys.exit(SweetShopCommandParser().parse_args(sys.argv[1:]))


if __name__ == "__main__":
    console_main()
