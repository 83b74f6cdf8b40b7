#!/usr/bin/env python3
import argparse

from promptfeed.orchestrator import run_once


def main():
    parser = argparse.ArgumentParser(description="promptfeed CLI: collect new prompts from a markdown list")
    parser.add_argument("--config", help="Path to YAML config (defaults to the built-in songguoxs source)")
    parser.add_argument("--reference", dest="reference_path", help="Existing prompts JSON used for dedup")
    parser.add_argument("--output", dest="output_path", help="Where to write the new prompts JSON")
    parser.add_argument("--timeout", dest="fetch_timeout", type=float, help="HTTP timeout in seconds")
    args = parser.parse_args()

    overrides = {
        "reference_path": args.reference_path,
        "output_path": args.output_path,
        "fetch_timeout": args.fetch_timeout,
    }

    result = run_once(args.config, overrides=overrides)
    print(f"status={result.status} new={len(result.new_records)} saved={result.output_path}")


if __name__ == "__main__":
    main()
