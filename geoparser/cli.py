import argparse
import json
import logging
from pathlib import Path

from geoparser.config import PipelineConfig
from geoparser.evaluate import DEFAULT_MAX_ERROR_KM, evaluate
from geoparser.pipeline import GeoparsingPipeline


def main():
    parser = argparse.ArgumentParser(description="Resolve toponyms to gazetteer places.")
    parser.add_argument(
        "--config",
        type=str,
        required=True,
        help="Path to pipeline config JSON file.",
    )
    parser.add_argument(
        "--input",
        type=str,
        nargs="+",
        required=True,
        help="Input file paths.",
    )
    parser.add_argument(
        "--output",
        type=str,
        help="Optional JSONL output path.",
    )
    parser.add_argument(
        "--evaluate",
        action="store_true",
        help="Compare resolutions with gold annotations and print a JSON report.",
    )
    parser.add_argument(
        "--max-error-km",
        type=float,
        default=DEFAULT_MAX_ERROR_KM,
        help="Distance threshold for --evaluate accuracy.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level.",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config_data = json.loads(Path(args.config).read_text(encoding="utf-8"))
    config = PipelineConfig.from_dict(config_data)

    pipeline = GeoparsingPipeline(config)
    results = pipeline.run(args.input, output_path=args.output)

    if args.evaluate:
        report = evaluate(results, max_error_km=args.max_error_km)
        print(json.dumps(report.as_dict(), indent=2))


if __name__ == "__main__":
    main()
