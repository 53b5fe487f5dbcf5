# backend/container.py

import logging
import threading
from typing import Dict, Any, Callable, List

from backend.core.contracts import Container as ContainerInterface

logger = logging.getLogger(__name__)


class Container(ContainerInterface):
    """一个简单的、线程安全的依赖注入容器，带循环依赖检测。"""
    def __init__(self):
        self._factories: Dict[str, Callable] = {}
        self._singletons: Dict[str, bool] = {}
        self._instances: Dict[str, Any] = {}
        # 资源请求在工作线程中解析服务，需要可重入锁
        self._lock = threading.RLock()
        # 每个线程独立的解析栈
        self._local = threading.local()

    def _get_resolution_stack(self) -> List[str]:
        if not hasattr(self._local, 'resolution_stack'):
            self._local.resolution_stack = []
        return self._local.resolution_stack

    def register(self, name: str, factory: Callable, singleton: bool = True) -> None:
        """注册一个服务工厂。工厂可以接收容器本身作为唯一参数，也可以无参。"""
        with self._lock:
            if name in self._factories:
                logger.warning(f"Overwriting service registration for '{name}'")
                self._instances.pop(name, None)
            self._factories[name] = factory
            self._singletons[name] = singleton

    def has(self, name: str) -> bool:
        return name in self._factories

    def _build(self, name: str) -> Any:
        factory = self._factories[name]
        try:
            return factory(self)
        except TypeError:
            return factory()

    def resolve(self, name: str) -> Any:
        """
        解析（获取）一个服务实例。
        未注册的服务抛出 ValueError，循环依赖抛出 RuntimeError。
        """
        resolution_stack = self._get_resolution_stack()
        if name in resolution_stack:
            path = " -> ".join(resolution_stack + [name])
            raise RuntimeError(f"Circular dependency detected: {path}")

        resolution_stack.append(name)
        try:
            if name not in self._factories:
                raise ValueError(f"Service '{name}' not found in container.")

            if not self._singletons.get(name, True):
                return self._build(name)

            with self._lock:
                if name not in self._instances:
                    self._instances[name] = self._build(name)
                    logger.debug(f"Resolved service '{name}'. Singleton: True")
                return self._instances[name]
        finally:
            resolution_stack.pop()
