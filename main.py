import argparse
import math

from config.matching import DEFAULT_THRESHOLD, REFERENCE_SET_PATH
from PoseMatching.gesture_session import GestureSession
from PoseMatching.reference_set import load_reference_set


def finite_threshold(value: str) -> float:
    threshold = float(value)
    if not math.isfinite(threshold):
        raise argparse.ArgumentTypeError(f"threshold must be a finite number, got {value}")
    return threshold


def main():
    parser = argparse.ArgumentParser(description="Hand pose recording and template matching")
    parser.add_argument(
        "-r",
        "--reference",
        default=None,
        help="Reference set JSON to classify against (omit to only record)",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=str(REFERENCE_SET_PATH),
        help="Where to export the averaged samples recorded in this session",
    )
    parser.add_argument(
        "-t",
        "--threshold",
        type=finite_threshold,
        default=DEFAULT_THRESHOLD,
        help="Maximum (exclusive) descriptor distance accepted as a match",
    )
    parser.add_argument("-c", "--camera", type=int, default=0, help="Camera index")
    args = parser.parse_args()

    reference_set = load_reference_set(args.reference) if args.reference else None
    if reference_set is not None:
        print(f"Loaded reference set: {', '.join(sorted(reference_set))}")

    session = GestureSession(
        camera_index=args.camera,
        reference_set=reference_set,
        threshold=args.threshold,
        output_path=args.output,
    )
    session.run()


if __name__ == "__main__":
    main()
