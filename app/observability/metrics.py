"""
Prometheus 指标定义

所有指标统一在此文件定义，中间件和业务代码按需引用。
"""

from prometheus_client import Counter, Gauge, Histogram

# ── 请求级指标 ──

REQUEST_TOTAL = Counter(
    "todo_request_total",
    "HTTP 请求总数",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "todo_request_duration_ms",
    "HTTP 请求耗时（毫秒）",
    ["method", "endpoint"],
    buckets=[5, 10, 25, 50, 100, 200, 500, 1000, 2000],
)

# ── 业务指标 ──

TODO_OPERATION_TOTAL = Counter(
    "todo_operation_total",
    "Todo 操作总数",
    ["operation", "outcome"],  # outcome: ok/invalid/not_found/error
)

TODO_ITEMS = Gauge(
    "todo_items",
    "最近一次读写后列表中的 Todo 条数",
)

# ── 错误指标 ──

STORE_ERROR_TOTAL = Counter(
    "todo_store_error_total",
    "存储层读写失败总数",
    ["op"],  # op: init/read/write
)
