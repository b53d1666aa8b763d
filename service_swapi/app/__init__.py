"""
SWAPI console service package.

Fetches resources from the Star Wars API on demand, caches every parsed
response for the lifetime of the process, and prints selected fields to the
operator console.

Structure:
- app.main: FastAPI app, routes (`/api` trigger, `/stats`) and CLI entry.
- app.orchestrator: the fixed five-step fetch cycle.
- app.client: cached, timeout-bound HTTPS fetches.
- app.cache / app.stats / app.state: process-lifetime state.
- app.renderers: console output for each resource kind.
"""
