# backend/core/hooks.py
import asyncio
import logging
import inspect
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Awaitable, TypeVar, Optional

from backend.core.contracts import HookManager as HookManagerInterface, Container

logger = logging.getLogger(__name__)

T = TypeVar('T')

# 钩子函数的通用签名
HookCallable = Callable[..., Awaitable[Any]]

@dataclass(order=True)
class HookImplementation:
    """封装一个钩子实现及其元数据。"""
    priority: int
    func: HookCallable = field(compare=False)
    plugin_name: str = field(compare=False, default="<unknown>")

class HookManager(HookManagerInterface):
    """
    中心化的钩子调度服务。
    调用钩子时会按函数签名自动注入共享上下文（container、hook_manager、app 等）。
    """
    def __init__(self, container: Optional[Container] = None):
        self._hooks: Dict[str, List[HookImplementation]] = defaultdict(list)
        self._shared_context: Dict[str, Any] = {"hook_manager": self}
        if container is not None:
            self._shared_context["container"] = container

    def add_shared_context(self, name: str, service: Any) -> None:
        """允许在启动过程中向钩子系统添加更多的共享服务。"""
        if name in self._shared_context:
            logger.warning(f"Overwriting shared context for hooks: '{name}'")
        self._shared_context[name] = service

    @property
    def hook_names(self) -> List[str]:
        return list(self._hooks.keys())

    def _prepare_hook_kwargs(self, func: HookCallable, call_context: Dict[str, Any], skip_first: bool = False) -> Dict[str, Any]:
        """只传递钩子函数声明过的参数；接受 **kwargs 的函数拿到全部上下文。"""
        params = list(inspect.signature(func).parameters.values())
        if skip_first and params:
            params = params[1:]

        if any(p.kind == p.VAR_KEYWORD for p in params):
            return dict(call_context)
        return {p.name: call_context[p.name] for p in params if p.name in call_context}

    def add_implementation(
        self,
        hook_name: str,
        implementation: HookCallable,
        priority: int = 10,
        plugin_name: str = "<core>"
    ):
        """向管理器注册一个钩子实现。数字越小越先执行。"""
        if not inspect.iscoroutinefunction(implementation):
            raise TypeError(f"Hook implementation for '{hook_name}' must be an async function.")

        self._hooks[hook_name].append(HookImplementation(priority=priority, func=implementation, plugin_name=plugin_name))
        self._hooks[hook_name].sort()
        logger.debug(f"Registered hook '{hook_name}' from plugin '{plugin_name}' with priority {priority}.")

    async def trigger(self, hook_name: str, **kwargs: Any) -> None:
        """触发一个“通知型”钩子。并发执行，忽略返回值，错误只记录不传播。"""
        if hook_name not in self._hooks:
            return

        call_context = {**self._shared_context, **kwargs}
        implementations = self._hooks[hook_name]

        results = await asyncio.gather(
            *(impl.func(**self._prepare_hook_kwargs(impl.func, call_context)) for impl in implementations),
            return_exceptions=True
        )

        for impl, result in zip(implementations, results):
            if isinstance(result, Exception):
                logger.error(
                    f"Error in NOTIFICATION hook '{hook_name}' from plugin '{impl.plugin_name}': {result}",
                    exc_info=result
                )

    async def filter(self, hook_name: str, data: T, **kwargs: Any) -> T:
        """触发一个“过滤型”钩子，按优先级形成处理链。出错的实现会被跳过。"""
        if hook_name not in self._hooks:
            return data

        call_context = {**self._shared_context, **kwargs}
        current_data = data

        for impl in self._hooks[hook_name]:
            try:
                prepared_kwargs = self._prepare_hook_kwargs(impl.func, call_context, skip_first=True)
                current_data = await impl.func(current_data, **prepared_kwargs)
            except Exception as e:
                logger.error(
                    f"Error in FILTER hook '{hook_name}' from plugin '{impl.plugin_name}'. Skipping. Error: {e}",
                    exc_info=e
                )

        return current_data
