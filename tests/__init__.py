import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sweetshop.config import TestConfig


def random_suffix() -> str:
    """랜덤 ID뒤에 붙일 UUID 기반의 6자리 임의의 ID를 생성합니다."""
    return uuid.uuid4().hex[:6]


def random_name(name: str = "sweet") -> str:
    """임의의 품목 이름을 생성합니다."""
    return f"{name}-{random_suffix()}"


def random_email(name: str = "user") -> str:
    """임의의 이메일 주소를 생성합니다."""
    return f"{name}-{random_suffix()}@example.com"


class TickingClock:
    """호출할 때마다 1초씩 증가하는 시각을 리턴하는 테스트용 시계.

    생성 순서대로 `created_at` 이 달라지므로 정렬 결과를 예측할 수 있습니다.
    """

    def __init__(self, start: datetime = datetime(2024, 1, 1, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


@dataclass
class FileDbConfig(TestConfig):
    """파일 SQLite DB를 사용하는 테스트 설정.

    메모리 DB는 하나의 연결을 공유하고 엔진마다 따로 만들어지므로, 여러 스레드나
    여러 엔진이 같은 데이터를 봐야 하는 테스트에서 사용합니다.
    """

    db_path: str = ""
    timeout: float = 30.0

    def get_db_url(self) -> str:
        return f"sqlite:///{self.db_path}"

    def get_db_timeout(self) -> float:
        return self.timeout
