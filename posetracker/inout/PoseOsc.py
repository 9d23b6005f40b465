
from dataclasses import dataclass
from threading import Thread, Lock
from traceback import print_exc
from typing import Any, Sequence

from pythonosc.osc_server import ThreadingOSCUDPServer
from pythonosc.dispatcher import Dispatcher

from posetracker.ConfigBase import ConfigBase, config_field
from posetracker.pose.Keypoints import Keypoints
from posetracker.pose.Pose import Pose
from posetracker.tracker.PosesTracker import PosesTracker


@dataclass
class PoseOscConfig(ConfigBase):
    ip_address_in: str =    config_field("127.0.0.1", fixed=True, description="Incoming OSC IP address")
    port_in: int =          config_field(9000, min=1024, max=65535, fixed=True, description="Incoming OSC port")
    address: str =          config_field("/pose", fixed=True, description="OSC address carrying pose messages")
    verbose: bool =         config_field(False, description="Print every received pose")


def pose_from_osc_args(args: Sequence[Any]) -> tuple[str, Pose]:
    """Decode 'sender_id pose_id x0 y0 s0 ... x16 y16 s16' into (sender_id, Pose).

    Raises:
        ValueError: If the ids are missing or the keypoint data is malformed.
    """
    if len(args) < 2:
        raise ValueError(f"Pose message needs a sender id and a pose id, got {len(args)} arguments")

    sender_id: str = str(args[0])
    raw_id = args[1]
    # OSC senders may encode integer ids as floats
    if isinstance(raw_id, float) and raw_id.is_integer():
        raw_id = int(raw_id)
    pose_id: int | str = raw_id if isinstance(raw_id, (int, str)) else str(raw_id)
    try:
        keypoints: Keypoints = Keypoints.from_flat_array(float(v) for v in args[2:])
    except TypeError as e:
        raise ValueError(f"Pose message from '{sender_id}' has non-numeric keypoint data: {e}") from e

    return sender_id, Pose(id=pose_id, keypoints=keypoints)


class PoseOsc:
    """Receives poses over OSC and feeds them into a PosesTracker."""

    def __init__(self, config: PoseOscConfig, tracker: PosesTracker) -> None:
        self.config: PoseOscConfig = config
        self.tracker: PosesTracker = tracker

        self.osc_receive: Dispatcher = Dispatcher()
        self.osc_receive.map(config.address, self._osc_handler)

        self.server: ThreadingOSCUDPServer | None = None
        self.server_thread: Thread | None = None
        self._lock = Lock()

    def start(self) -> None:
        with self._lock:
            if self.server is not None:
                return
            self.server = ThreadingOSCUDPServer((self.config.ip_address_in, self.config.port_in), self.osc_receive)
            self.server_thread = Thread(target=self.server.serve_forever, daemon=True, name="PoseOsc")
            self.server_thread.start()
        print(f"PoseOsc: Listening on {self.config.ip_address_in}:{self.config.port_in}{self.config.address}")

    def stop(self) -> None:
        with self._lock:
            server, thread = self.server, self.server_thread
            self.server, self.server_thread = None, None
        if server is None:
            return
        server.shutdown()
        server.server_close()
        if thread is not None:
            thread.join(timeout=1.0)

    @property
    def is_running(self) -> bool:
        return self.server is not None

    def _osc_handler(self, address: str, *args) -> None:
        try:
            sender_id, pose = pose_from_osc_args(args)
        except ValueError as e:
            print(f"PoseOsc: Ignoring malformed message on {address}: {e}")
            return

        if self.config.verbose:
            print(f"PoseOsc: From {sender_id}: {pose}")

        try:
            self.tracker.seen(sender_id, pose)
        except Exception as e:
            print(f"PoseOsc: Error tracking pose from {sender_id}: {e}")
            print_exc()
