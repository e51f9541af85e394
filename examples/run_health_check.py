"""
Health Check: Sequential Synapse

Runs three check neurons one after another. check-db always fails, so the
run finishes PARTIAL and keeps going because stopOnError is false.

```text
check-nginx ──▶ check-api ──▶ check-db (retry x3, exponential)
```

The record is appended to a JSON history under ./data/history and read
back at the end.

Run with:
```bash
PYTHONPATH=src python examples/run_health_check.py
```
"""

import asyncio
import logging
from pathlib import Path

from cortex import Executor, HistoryManager, load_from_directory

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

SYNAPSE_DIR = Path(__file__).parent / "health_check"


async def main():
    history = HistoryManager(Path("data/history"))
    synapse = load_from_directory(SYNAPSE_DIR)

    executor = Executor(history=history)
    record = await executor.execute(synapse, SYNAPSE_DIR)

    print()
    print(f"Status: {record.status.value} in {record.duration.total_seconds():.2f}s")
    for result in record.neuron_results:
        print(f"  {result.name:<12} {result.status.value:<8} exit={result.exit_code}")

    runs = await history.get_history(synapse.name)
    print(f"\n{len(runs)} run(s) recorded for {synapse.name}")


if __name__ == "__main__":
    asyncio.run(main())
