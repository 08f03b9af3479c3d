from collections.abc import Awaitable
from functools import wraps
from inspect import iscoroutinefunction
import types
from typing import TYPE_CHECKING, Any, Callable, ParamSpec, TypeVar, cast, overload

from opentelemetry import trace

if TYPE_CHECKING:
    from loguru import Logger as LoguruLogger

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import CustomBaseError
from src.platform.logging.loguru_io_config import (
    ExtraField,
    call_depth_var,
    custom_logger,
)
from src.platform.logging.loguru_io_utils import (
    build_call_target_func_path,
    get_chain_start_time,
    mask_sensitive,
    normalize_args_kwargs,
    reset_call_depth,
    should_mask_keyword,
    truncate_content,
)

_F = TypeVar('_F', bound=Callable[..., Any])


class LoguruIO:
    """
    Call-boundary logger used by `@Logger.io`.

    DEBUG builds log masked arguments and return values. A failure is logged once, at
    the innermost decorated frame: business errors (CustomBaseError) as one line with
    their HTTP status, anything else with a traceback. Both are attached to the
    current span.
    """

    def __init__(
        self, custom_logger: 'LoguruLogger', *, reraise: bool = True, truncate_content: bool = False
    ) -> None:
        self._custom_logger = custom_logger
        self.reraise = reraise
        self.truncate_content = truncate_content
        self.extra: dict[str, Any] = {}
        self.depth = 2

    def _bound(self, extra_depth: int = 0) -> 'LoguruLogger':
        return self._custom_logger.bind(**self.extra).opt(depth=self.depth + extra_depth)

    def on_enter(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
        call_depth_var.set(call_depth_var.get() + 1)
        self.extra[ExtraField.CHAIN_START_TIME] = get_chain_start_time()
        if settings.DEBUG:
            self._bound().debug(
                f'args: {self.mask_sensitive(args)}, kwargs: {self.mask_sensitive(kwargs)}'
            )

    def on_return(self, return_value: Any) -> None:
        if settings.DEBUG:
            self._bound().debug(f'return: {self.mask_sensitive(return_value)}')

    def on_failure(self, e: Exception) -> None:
        if getattr(e, '_has_logged', False):
            return
        e._has_logged = True  # type: ignore[attr-defined]

        span = trace.get_current_span()
        if isinstance(e, CustomBaseError):
            self._bound(1).error(f'{type(e).__name__}({e.status_code}): {e}')
            span.set_attribute('error.type', type(e).__name__)
            span.set_attribute('error.code', str(getattr(e, 'code', e.status_code)))
        else:
            self._bound(1).exception(f'{type(e).__name__}: {e}')
            span.record_exception(e)

    def _hide_from_traceback(self, func: Callable[..., Any]) -> Callable[..., Any]:
        func.__code__ = func.__code__.replace(  # type: ignore[attr-defined]
            co_filename=cast(types.FunctionType, self._custom_logger.catch).__code__.co_filename
        )
        return func

    def mask_sensitive(self, data: Any) -> Any:
        if isinstance(data, dict):
            processed: Any = {
                key: self.mask_sensitive(should_mask_keyword(key, value))
                for key, value in data.items()
            }
        elif isinstance(data, list | tuple):
            processed = type(data)(self.mask_sensitive(item) for item in data)
        else:
            processed = mask_sensitive(data)
        return truncate_content(processed) if self.truncate_content else processed

    def __call__(self, func: _F) -> _F:
        self.extra[ExtraField.CALL_TARGET] = build_call_target_func_path(func)

        if iscoroutinefunction(func):

            @wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                try:
                    self.on_enter(args, kwargs)
                    args, kwargs = normalize_args_kwargs(func, *args, **kwargs)
                    return_value = await cast(Awaitable[Any], func(*args, **kwargs))
                    self.on_return(return_value)
                    return return_value
                except Exception as e:
                    self.on_failure(e)
                    if self.reraise:
                        raise
                    return None
                finally:
                    reset_call_depth()

            return cast(_F, self._hide_from_traceback(async_wrapper))

        @wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                self.on_enter(args, kwargs)
                args, kwargs = normalize_args_kwargs(func, *args, **kwargs)
                return_value = func(*args, **kwargs)
                self.on_return(return_value)
                return return_value
            except Exception as e:
                self.on_failure(e)
                if self.reraise:
                    raise
                return None
            finally:
                reset_call_depth()

        return cast(_F, self._hide_from_traceback(sync_wrapper))


_P = ParamSpec('_P')
_T = TypeVar('_T')


class Logger:
    base = custom_logger

    @overload
    @staticmethod
    def io(func: Callable[_P, _T]) -> Callable[_P, _T]: ...

    @overload
    @staticmethod
    def io(func: None = ..., *, reraise: bool = ..., truncate_content: bool = ...) -> LoguruIO: ...

    @staticmethod
    def io(
        func: Callable[_P, _T] | None = None, *, reraise: bool = True, truncate_content: bool = True
    ) -> Callable[_P, _T] | LoguruIO:
        decorator = LoguruIO(
            custom_logger=custom_logger, reraise=reraise, truncate_content=truncate_content
        )
        return decorator(func) if func else decorator
