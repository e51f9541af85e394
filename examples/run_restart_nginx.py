"""
Restart Nginx: Parallel Synapse with Conditions and Rollback

```text
drain-traffic ───────┐
                     ├──▶ restart-nginx ──▶ verify-nginx
snapshot-config ─────┘        │
  (production only)           └── onFailure: undrain-traffic
```

drain-traffic and snapshot-config sit on the same level and run
concurrently (maxConcurrency 2). snapshot-config only runs when the
executor environment says environment == 'production'; pass --staging
to see it skipped.

Run with:
```bash
PYTHONPATH=src python examples/run_restart_nginx.py
PYTHONPATH=src python examples/run_restart_nginx.py --staging
```
"""

import asyncio
import logging
import sys
from pathlib import Path

from cortex import Executor, level_graph, load_from_directory, summarize
from cortex.storage import SqliteHistoryStore

logging.basicConfig(level=logging.WARNING)

SYNAPSE_DIR = Path(__file__).parent / "restart_nginx"


async def main():
    synapse = load_from_directory(SYNAPSE_DIR)

    summary = summarize(synapse)
    print(f"{summary.total} neurons, {summary.root_count} roots, depth {summary.max_depth}")
    print(level_graph(synapse))

    history = SqliteHistoryStore("data/restart_nginx.db")
    await history.connect()
    try:
        executor = Executor(history=history)
        env = "staging" if "--staging" in sys.argv else "production"
        executor.set_environment({"environment": env})

        record = await executor.execute(synapse, SYNAPSE_DIR)
        if record.failed_neurons:
            print(f"\nFailed: {', '.join(record.failed_neurons)}")

        print(f"\nStatus: {record.status.value}")
        for result in record.neuron_results:
            print(f"  {result.name:<16} {result.status.value}")
    finally:
        await history.close()


if __name__ == "__main__":
    asyncio.run(main())
