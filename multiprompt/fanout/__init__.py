"""Fan-out engine.

Broadcasts one prompt to several LLM provider accounts concurrently:
  - Provider Adapters (one request/response shape per provider)
  - Fan-Out Dispatcher (parallel calls, per-call timing and error isolation)
  - Result Aggregator (ordered envelope, overall latency)
"""
