# receiver_print.py
#
# Runs the device-side receiver and prints the latest command a few times a second.
# Handy for checking the operator client without any hardware attached.
#
# Run:
#   python3 -m teleop_link.runners.receiver_print
#   RECEIVER_PORT=9000 teleop-receiver

from __future__ import annotations

import asyncio

from teleop_link import config
from teleop_link.receiver import ControlReceiver
from teleop_link.utils import setup_logging

PRINT_INTERVAL_S = config.env_float("PRINT_INTERVAL_S", 0.5)


async def _print_latest(receiver: ControlReceiver) -> None:
    last_updates = -1
    while True:
        await asyncio.sleep(PRINT_INTERVAL_S)
        if receiver.state.updates == last_updates:
            continue
        last_updates = receiver.state.updates
        cmd = receiver.state.get_latest()
        print(f"gamepad: lx={cmd.lx:+.3f} ly={cmd.ly:+.3f} rx={cmd.rx:+.3f} ry={cmd.ry:+.3f}")


async def _run(receiver: ControlReceiver) -> None:
    printer = asyncio.create_task(_print_latest(receiver))
    try:
        await receiver.run_forever()
    finally:
        printer.cancel()


def main() -> None:
    setup_logging(config.LOG_LEVEL)
    receiver = ControlReceiver(
        config.RECEIVER_HOST,
        config.RECEIVER_PORT,
        path=config.WS_PATH,
        ping_interval_s=config.RECEIVER_PING_INTERVAL_S,
        client_timeout_s=config.RECEIVER_CLIENT_TIMEOUT_S,
    )

    print("Receiver starting")
    print(f"Listening on {config.RECEIVER_HOST}:{config.RECEIVER_PORT}{config.WS_PATH}")
    print("Ctrl+C to exit.\n")

    try:
        asyncio.run(_run(receiver))
    except KeyboardInterrupt:
        print("\nStopped.")


if __name__ == "__main__":
    main()
