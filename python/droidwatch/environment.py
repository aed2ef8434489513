"""Registry of connected device sessions."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from .config import SessionConfig
from .device import DeviceSession, SessionState


logger = logging.getLogger(__name__)

SessionFactory = Callable[..., DeviceSession]


class DeviceEnvironment:
    """Owns one :class:`DeviceSession` per device id.

    Sessions remove themselves through :meth:`device_removed` when they shut
    down. Extra keyword arguments are passed to every session created.
    """

    def __init__(
        self,
        *,
        config: Optional[SessionConfig] = None,
        session_factory: SessionFactory = DeviceSession,
        **session_kwargs: Any,
    ) -> None:
        self.config = config or SessionConfig()
        self._session_factory = session_factory
        self._session_kwargs = session_kwargs
        self._devices: Dict[str, DeviceSession] = {}
        self._lock = threading.Lock()

    def connect(self, device_id: str) -> DeviceSession:
        """Return the live session for *device_id*, creating and initializing it if needed."""
        with self._lock:
            device = self._devices.get(device_id)
            if device is not None and device.state is not SessionState.TERMINATED:
                return device
            device = self._session_factory(self, device_id, config=self.config, **self._session_kwargs)
            self._devices[device_id] = device
        try:
            device.initialize()
        except (Exception, KeyboardInterrupt):
            logger.debug("initialize failed for %r", device, exc_info=True)
            device.shutdown()
            raise
        return device

    def get(self, device_id: str) -> Optional[DeviceSession]:
        with self._lock:
            return self._devices.get(device_id)

    @property
    def devices(self) -> List[DeviceSession]:
        with self._lock:
            return list(self._devices.values())

    def device_removed(self, device: DeviceSession) -> None:
        with self._lock:
            if self._devices.get(device.device_id) is device:
                del self._devices[device.device_id]
        logger.debug("device removed: %r", device)

    def shutdown(self) -> None:
        for device in self.devices:
            device.shutdown()


__all__ = ["DeviceEnvironment", "SessionFactory"]
