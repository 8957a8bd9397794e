"""运行取消信号。"""

import threading

from ..exceptions import RunCancelledError


class CancellationToken:
    """协作式取消信号，在每个条目或帧之间检查"""

    def __init__(self) -> None:
        # 宿主可能在其他线程中触发取消
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise RunCancelledError("运行已取消")


def check_cancelled(token: CancellationToken | None) -> None:
    """token 为 None 时不做任何检查"""
    if token is not None:
        token.raise_if_cancelled()
