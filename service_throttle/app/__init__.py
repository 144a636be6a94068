"""
Trace throttle mock service package.

Stands in for a trace-ingestion API (PutTraceSegments) so client
integrations can be exercised against controllable throttling:

- Administrative endpoints switch the operating mode between accepting
  and throttled(intensity)
- Every trace submission is run through an admission strategy, either
  probabilistic sampling on the mode or a load-weighted token bucket
- Rejected submissions get the 429 ThrottlingException envelope

Structure:
- main.py: FastAPI service, routes and process bootstrap
- schemas.py: request/response wire models
- throttle/: mode store, token bucket and admission control
"""
