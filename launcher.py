from argparse import ArgumentParser, Namespace
from signal import signal, SIGINT
from threading import Event

from posetracker.inout.PoseOsc import PoseOsc, PoseOscConfig
from posetracker.tracker.PoseTracker import PoseTracker
from posetracker.tracker.PosesTracker import PosesTracker, PosesTrackerConfig


def main() -> None:
    parser: ArgumentParser = ArgumentParser(description="Track poses received over OSC")
    parser.add_argument('-ip',      '--ip',         type=str,   default='127.0.0.1',    help='incoming OSC ip address')
    parser.add_argument('-p',       '--port',       type=int,   default=9000,           help='incoming OSC port')
    parser.add_argument('-a',       '--address',    type=str,   default='/pose',        help='OSC address of pose messages')
    parser.add_argument('-age',     '--max-age',    type=float, default=10000.0,        help='milliseconds before an unseen body expires')
    parser.add_argument('-i',       '--interval',   type=float, default=1.0,            help='seconds between expiry scans')
    parser.add_argument('-v',       '--verbose',    action='store_true',                help='print every received pose')

    args: Namespace = parser.parse_args()

    tracker = PosesTracker(PosesTrackerConfig(max_age_ms=args.max_age, expire_interval=args.interval))

    def on_added(t: PoseTracker) -> None:
        print(f"Added {t.guid} ({tracker.size} tracked)")

    def on_expired(t: PoseTracker) -> None:
        print(f"Expired {t.guid} after {t.sample_count} samples ({tracker.size} tracked)")

    tracker.add_added_callback(on_added)
    tracker.add_expired_callback(on_expired)

    osc = PoseOsc(PoseOscConfig(ip_address_in=args.ip, port_in=args.port, address=args.address, verbose=args.verbose), tracker)

    shutdown_event = Event()

    def signal_handler_exit(sig, frame) -> None:
        print("Received interrupt signal, shutting down...")
        shutdown_event.set()

    signal(SIGINT, signal_handler_exit)

    tracker.start()
    osc.start()
    try:
        shutdown_event.wait()
    finally:
        osc.stop()
        tracker.stop()


if __name__ == '__main__':
    main()
