"""
Event watcher - poll a node for new contract logs.

Installs an ``eth_newFilter`` and polls ``eth_getFilterChanges``. Nodes that
do not keep filters (many public endpoints) are handled by polling
``eth_getLogs`` over each new block range instead.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any, Callable, Optional

from ..errors import RpcError
from .abi import DecodedLog, decode_log, encode_topics, to_checksum_address
from .rpc import to_hex

if TYPE_CHECKING:
    from .public import PublicClient

logger = logging.getLogger(__name__)


class EventWatcher:
    """
    Deliver decoded logs of one event to ``on_logs``.

    ``on_logs`` is called once per poll that returns at least one log.
    """

    def __init__(
        self,
        client: "PublicClient",
        address: str,
        event: dict[str, Any],
        on_logs: Callable[[list[DecodedLog]], None],
        args: Optional[dict[str, Any]] = None,
        poll_interval: float = 4.0,
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> None:
        self.client = client
        self.address = to_checksum_address(address)
        self.event = event
        self.topics = encode_topics(event, args)
        self.on_logs = on_logs
        self.poll_interval = poll_interval
        self.on_error = on_error

        self._filter_id: Optional[str] = None
        self._last_block: Optional[int] = None
        self._installed = False
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def uses_filter(self) -> bool:
        return self._filter_id is not None

    def install(self) -> None:
        """Create the node-side filter, or record the head block for log polling."""
        try:
            self._filter_id = self.client.request(
                "eth_newFilter", [{"address": self.address, "topics": self.topics}]
            )
            logger.debug("installed filter %s for %s", self._filter_id, self.event["name"])
        except RpcError as exc:
            logger.debug("eth_newFilter rejected (%s), polling eth_getLogs", exc)
            self._filter_id = None
            self._last_block = self.client.get_block_number()
        self._installed = True

    def poll(self) -> list[DecodedLog]:
        """Fetch new logs once and hand them to ``on_logs``."""
        if not self._installed:
            self.install()

        if self._filter_id is not None:
            try:
                raw_logs = self.client.request("eth_getFilterChanges", [self._filter_id]) or []
            except RpcError:
                # Nodes expire idle filters; the next poll installs a new one.
                self._filter_id = None
                self._installed = False
                raise
        else:
            raw_logs = self._poll_range()

        logs = [decode_log([self.event], log) for log in raw_logs if not log.get("removed")]
        if logs:
            self.on_logs(logs)
        return logs

    def _poll_range(self) -> list[dict[str, Any]]:
        head = self.client.get_block_number()
        if self._last_block is None:
            self._last_block = head
            return []
        if head <= self._last_block:
            return []
        raw_logs = self.client.request(
            "eth_getLogs",
            [{
                "address": self.address,
                "topics": self.topics,
                "fromBlock": to_hex(self._last_block + 1),
                "toBlock": to_hex(head),
            }],
        ) or []
        self._last_block = head
        return raw_logs

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                self.poll()
            except Exception as exc:  # polling continues after a failed round
                if self.on_error is not None:
                    self.on_error(exc)
                else:
                    logger.warning("watch %s poll failed: %s", self.event["name"], exc)
            self._stop.wait(self.poll_interval)

    def start(self) -> "EventWatcher":
        """Install the filter and start polling in a daemon thread."""
        if not self._installed:
            self.install()
        self._thread = threading.Thread(
            target=self._run, name=f"watch-{self.event['name']}", daemon=True
        )
        self._thread.start()
        return self

    def stop(self) -> None:
        self._stop.set()
        if self._filter_id is not None:
            try:
                self.client.request("eth_uninstallFilter", [self._filter_id])
            except RpcError as exc:
                logger.debug("eth_uninstallFilter failed: %s", exc)
            self._filter_id = None

    unwatch = stop


def wait_forever() -> None:
    """Block the calling thread until the process is terminated."""
    threading.Event().wait()
