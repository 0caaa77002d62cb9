# app/entrypoint/__init__.py
"""
Container entrypoint.
Brings a fresh container from cold to serving requests:
- config: BootstrapConfig resolved once from `.env` and the environment
- policy: phase results and the fatal/degrade/warn table
- storage: writable directories and the static health marker
- keys: APP_KEY resolution
- readiness: bounded TCP wait for the database
- database: Aerich migrations and idempotent seeding
- artifacts: config/route/view/event cache rebuild
- handoff: exec into uvicorn or a supplied command
- orchestrator: sequences all of the above
"""
