# python -m app.entrypoint [command ...]
from app.entrypoint.orchestrator import main

main()
