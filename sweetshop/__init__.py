"""Sweet Shop: 과자 가게 재고 관리와 접근 제어 서비스."""

__version__ = "0.1.0"
