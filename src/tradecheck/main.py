"""Command line entrypoint."""

import os

from tradecheck.core.pipeline import run_pipeline
from tradecheck.utils.logging import configure_logging


def main() -> None:
    configure_logging()
    run_pipeline(
        input_path=os.getenv("TRADECHECK_INPUT", "input/document_set.json"),
        output_dir=os.getenv("TRADECHECK_OUTPUT_DIR", "output"),
        project_name=os.getenv("TRADECHECK_PROJECT_NAME", ""),
        brand_name=os.getenv("TRADECHECK_BRAND_NAME", ""),
        auto_fix=os.getenv("TRADECHECK_AUTO_FIX", "").lower() in {"1", "true", "yes"},
        language=os.getenv("TRADECHECK_LANGUAGE", "en"),
    )


if __name__ == "__main__":
    main()
