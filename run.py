import argparse
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from face_identity.classifier import NearestNeighborClassifier
from face_identity.config import get_settings
from face_identity.corpus import load_corpus
from face_identity.display import write_eigenfaces, write_match
from face_identity.exceptions import RecognitionError
from face_identity.logger import setup_logger
from face_identity.pipeline import RecognitionPipeline, normalize_face, read_query_image
from face_identity.subspace import SubspaceModel, train_subspace
from face_identity.types import LabeledSample

logger = setup_logger("main")


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Eigenface identity recognition")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--corpus",
        type=Path,
        default=settings.training_dir,
        help="Directory of <label>-<name>_<index>.<ext> training faces",
    )
    common.add_argument(
        "--components",
        type=int,
        default=settings.max_components,
        help="Maximum number of eigenfaces to keep",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("train", parents=[common], help="Train on the corpus and print a summary")

    predict = subparsers.add_parser("predict", parents=[common], help="Identify the face in one image file")
    predict.add_argument("image", type=Path, help="Cropped face image")
    predict.add_argument(
        "--threshold",
        type=float,
        default=settings.unknown_threshold,
        help="Report 'unknown' when the nearest face is farther than this distance",
    )
    predict.add_argument(
        "--result-dir",
        type=Path,
        default=None,
        help="Save the matched training face here as <name>.png",
    )

    live = subparsers.add_parser("live", parents=[common], help="Run real-time recognition on a webcam")
    live.add_argument("--camera", type=int, default=settings.camera_index, help="Webcam index")
    live.add_argument(
        "--threshold",
        type=float,
        default=settings.unknown_threshold,
        help="Report 'unknown' when the nearest face is farther than this distance",
    )

    export = subparsers.add_parser("export-eigenfaces", parents=[common], help="Save mean face and eigenfaces")
    export.add_argument("--output", type=Path, required=True, help="Output directory for PNG files")

    return parser


def _train(corpus: Path, components: Optional[int]) -> Tuple[List[LabeledSample], SubspaceModel]:
    samples = load_corpus(corpus, image_size=get_settings().image_size)
    return samples, train_subspace(samples, max_components=components)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        samples, model = _train(args.corpus, args.components)

        if args.command == "train":
            ratio = float(model.explained_variance_ratio.sum())
            print(
                f"Trained on {model.n_samples} faces of {len(set(model.names))} people: "
                f"{model.n_components} eigenfaces capture {ratio:.1%} of the variance."
            )
            return 0

        if args.command == "predict":
            face = normalize_face(read_query_image(args.image), model.image_size)
            result = NearestNeighborClassifier(model, threshold=args.threshold).predict(face)
            print(f"{result.name} (label={result.label}, distance={result.distance:.2f})")
            if args.result_dir is not None:
                match = samples[result.index]
                path = write_match(match.image, match.person_name, args.result_dir)
                print(f"Matched face written to {path}")
            return 0

        if args.command == "live":
            from face_identity.detector import HaarFaceDetector
            from face_identity.live import LiveRecognition

            pipeline = RecognitionPipeline(model, threshold=args.threshold)
            LiveRecognition(pipeline, HaarFaceDetector()).run(camera_index=args.camera)
            print("Recognition stopped.")
            return 0

        if args.command == "export-eigenfaces":
            written = write_eigenfaces(model.eigenface_images(), args.output)
            print(f"Wrote {len(written)} images to {args.output}")
            return 0

    except RecognitionError as exc:
        logger.error("Application error: %s", exc)
        print(f"Error: {exc}")
        return 1
    except KeyboardInterrupt:
        print("\nStopped by user.")
        return 1
    except Exception as exc:
        logger.exception("Unexpected failure")
        print(f"Unexpected error: {exc}")
        return 1

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
