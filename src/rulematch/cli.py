from __future__ import annotations

import argparse
import csv
import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List

from .engine import Matcher
from .errors import MatcherError
from .models import BatchResult, MatcherConfig, RecordMatches


# Keys under which a JSON object may carry its list of records
RECORD_KEYS = ("records", "items", "data")


def _read_json_records(path: Path) -> List[Dict[str, Any]]:
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = next((data[key] for key in RECORD_KEYS if isinstance(data.get(key), list)), None)
    if not isinstance(data, list):
        raise ValueError(f"JSON dataset must be a list of records or an object with one of {RECORD_KEYS}")
    return data


def _read_csv_records(path: Path) -> List[Dict[str, Any]]:
    with path.open("r", encoding="utf-8", newline="") as f:
        return list(csv.DictReader(f))


READERS: Dict[str, Callable[[Path], List[Dict[str, Any]]]] = {
    ".json": _read_json_records,
    ".csv": _read_csv_records,
}


def read_records(path: str) -> List[Dict[str, Any]]:
    p = Path(path)
    reader = READERS.get(p.suffix.lower())
    if reader is None:
        raise ValueError(f"Unsupported dataset format {p.suffix!r}; expected one of {sorted(READERS)}")
    if not p.exists():
        raise FileNotFoundError(str(p))
    return reader(p)


def run(rules_path: str, dataset_path: str, tag: str | None = None) -> BatchResult:
    config = MatcherConfig.from_yaml_file(rules_path)
    matcher = Matcher.from_config(config)
    records = read_records(dataset_path)

    result = BatchResult(tag=tag)
    for index, matches in enumerate(matcher.match_many(records, tag)):
        result.records.append(RecordMatches(index=index, matches=matches))
    return result


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Match dataset records against a rules file")
    parser.add_argument("rules", help="Rules YAML file")
    parser.add_argument("dataset", help="Dataset file (.csv or .json)")
    parser.add_argument("--tag", default=None, help="Only apply rules available under this tag")
    parser.add_argument("--output", default="-", help="Output file path or '-' for stdout")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )

    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")

    try:
        result = run(args.rules, args.dataset, args.tag)
    except (MatcherError, OSError, ValueError) as exc:
        parser.error(str(exc))

    output = json.dumps(result.model_dump(), indent=2, default=str)
    if args.output == "-":
        print(output)
    else:
        Path(args.output).write_text(output, encoding="utf-8")


if __name__ == "__main__":
    main()
