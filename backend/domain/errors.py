"""
Domain — 錯誤分類。
輸入錯誤在任何網路呼叫前拋出；上游錯誤由基礎設施層拋出，
由應用層決定是否進入降級流程。
"""


class FXBriefError(Exception):
    """所有業務錯誤的基底類別。"""


class UnrecognizedCurrencyError(FXBriefError):
    """無法辨識的貨幣（或別名比對出多個候選）。"""

    def __init__(self, raw: str | None, candidates: tuple[str, ...] = ()) -> None:
        self.raw = raw or ""
        self.candidates = candidates
        if candidates:
            super().__init__(f"ambiguous currency '{self.raw}': {', '.join(candidates)}")
        else:
            super().__init__(f"unrecognized currency '{self.raw}'")


class InvalidAmountError(FXBriefError):
    """金額格式無效。"""

    def __init__(self, raw: str) -> None:
        self.raw = raw
        super().__init__(f"invalid amount '{raw}'")


class SameCurrencyError(FXBriefError):
    """歷史查詢的來源與目標貨幣相同。"""

    def __init__(self, code: str) -> None:
        self.code = code
        super().__init__(f"source and target currency are both {code}")


class UpstreamUnavailableError(FXBriefError):
    """上游匯率 API 非 2xx、逾時或連線失敗。"""

    def __init__(self, url: str, reason: str, status_code: int | None = None) -> None:
        self.url = url
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"upstream unavailable ({reason}): {url}")


class InsufficientHistoricalDataError(FXBriefError):
    """所有降級策略後，資料點數仍低於門檻。"""

    def __init__(self, pair: str, points_found: int) -> None:
        self.pair = pair
        self.points_found = points_found
        super().__init__(f"insufficient history for {pair}: {points_found} points")
