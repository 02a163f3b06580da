# eva/dependencies/context.py
from typing import Annotated

from fastapi import Depends

from eva.core.cache import TTLCache, get_cache
from eva.core.clock import Clock, get_clock

ClockDep = Annotated[Clock, Depends(get_clock)]
CacheDep = Annotated[TTLCache, Depends(get_cache)]
