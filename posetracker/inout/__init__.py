from .PoseOsc import PoseOsc, PoseOscConfig, pose_from_osc_args
