"""Batch cleaning of image directories, optionally across worker processes."""

import json
import traceback
from functools import partial
from multiprocessing import Pool
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from tqdm import tqdm

from .config import Config, get_default_config
from .exceptions import ScanCleanerError
from .processors import (
    ArtifactCleaningProcessor,
    get_image_files,
    load_image,
    load_mask,
    save_image,
)
from .utils.logging_utils import get_logger, track_batch

logger = get_logger(__name__)


def find_whitelist_mask(image_path: Path, config: Config) -> Optional[Path]:
    """Return ``<whitelist_dir>/<stem><whitelist_suffix>`` if it exists."""
    if not config.directories.whitelist_dir:
        return None
    candidate = Path(config.directories.whitelist_dir) / (
        image_path.stem + config.output.whitelist_suffix
    )
    return candidate if candidate.is_file() else None


def clean_image_file(image_path: Path, config: Config) -> Dict[str, Any]:
    """Clean one image file and write the configured outputs.

    Returns:
        Dictionary with the output paths and the statistics record

    Raises:
        ScanCleanerError: If loading, cleaning or saving fails
    """
    image_path = Path(image_path)
    raster = load_image(image_path)

    manual_whitelist = None
    mask_path = find_whitelist_mask(image_path, config)
    if mask_path is not None:
        manual_whitelist = load_mask(mask_path, raster.shape[:2])
        logger.debug(f"Using manual whitelist {mask_path} for {image_path.name}")

    processor = ArtifactCleaningProcessor(config.output)
    result = processor.process(raster, params=config.params, manual_whitelist=manual_whitelist)

    dirs = config.directories
    out = config.output
    outputs = {}

    cleaned_path = Path(dirs.output_dir) / (image_path.stem + out.cleaned_suffix)
    save_image(result.cleaned, cleaned_path)
    outputs["cleaned"] = str(cleaned_path)

    if out.save_visualization:
        vis_path = Path(dirs.visualization_dir) / (image_path.stem + out.visualization_suffix)
        save_image(result.visualization, vis_path)
        outputs["visualization"] = str(vis_path)

    if out.save_stats:
        stats_path = Path(dirs.stats_dir) / (image_path.stem + out.stats_suffix)
        stats_path.parent.mkdir(parents=True, exist_ok=True)
        with open(stats_path, "w", encoding="utf-8") as f:
            json.dump(result.stats.to_dict(), f, indent=2)
        outputs["stats"] = str(stats_path)

    if out.save_debug_masks:
        processor.save_debug_images_to_dir(
            Path(dirs.output_dir) / "debug", prefix=image_path.stem
        )

    logger.info(
        f"{image_path.name}: removed {result.stats.removed_pixels} px, "
        f"protected {result.stats.near_black_pixels} px near ink"
    )
    return {"outputs": outputs, "stats": result.stats.to_dict()}


def process_single_image_wrapper(
    image_path: Path,
    config: Config,
) -> Tuple[Path, Optional[Dict[str, Any]], Optional[str]]:
    """Worker entry point; returns (image_path, result, error_message)."""
    try:
        return (image_path, clean_image_file(image_path, config), None)
    except ScanCleanerError as e:
        return (image_path, None, str(e))
    except Exception as e:
        error_msg = f"Error processing {image_path}: {e}\n{traceback.format_exc()}"
        return (image_path, None, error_msg)


class BatchCleaner:
    """Clean every image of a directory with one configuration."""

    def __init__(
        self,
        config: Optional[Config] = None,
        max_workers: Optional[int] = None,
        show_progress: bool = True
    ):
        """Initialize batch cleaner.

        Args:
            config: Configuration (defaults when None)
            max_workers: Worker processes; falls back to ``config.workers``
            show_progress: Whether to show a progress bar
        """
        self.config = config or get_default_config()
        self.max_workers = max_workers or self.config.workers
        self.show_progress = show_progress

        self.successful_results: List[Dict[str, Any]] = []
        self.failed_results: List[Dict[str, Any]] = []

    def process_batch(self, input_images: List[Path]) -> Dict[str, Any]:
        """Clean a list of images, in parallel when more than one worker is set.

        Individual failures are recorded in the summary instead of aborting
        the batch.
        """
        self.successful_results = []
        self.failed_results = []

        if not input_images:
            return self._generate_summary()

        self.config.create_output_directories()

        with track_batch("artifact cleaning", logger) as stats:
            if self.max_workers > 1 and len(input_images) > 1:
                self._process_parallel(input_images)
            else:
                self._process_sequential(input_images)
            stats["files_processed"] = len(self.successful_results)
            stats["files_failed"] = len(self.failed_results)

        return self._generate_summary()

    def _record(self, image_path: Path, result: Optional[Dict[str, Any]],
                error_msg: Optional[str]) -> None:
        if error_msg:
            logger.warning(f"Failed to clean {Path(image_path).name}: {error_msg.splitlines()[0]}")
            self.failed_results.append({'image': str(image_path), 'error': error_msg})
        else:
            self.successful_results.append({'image': str(image_path), **result})

    def _process_parallel(self, input_images: List[Path]) -> None:
        logger.info(f"Cleaning {len(input_images)} images using {self.max_workers} workers")

        process_func = partial(process_single_image_wrapper, config=self.config)

        with Pool(processes=min(self.max_workers, len(input_images))) as pool:
            results = pool.imap(process_func, input_images)
            for image_path, result, error_msg in tqdm(
                results, total=len(input_images), desc="Cleaning images",
                unit="img", disable=not self.show_progress
            ):
                self._record(image_path, result, error_msg)

    def _process_sequential(self, input_images: List[Path]) -> None:
        logger.info(f"Cleaning {len(input_images)} images sequentially")

        for image_path in tqdm(input_images, desc="Cleaning images", unit="img",
                               disable=not self.show_progress):
            self._record(*process_single_image_wrapper(image_path, self.config))

    def _generate_summary(self) -> Dict[str, Any]:
        total = len(self.successful_results) + len(self.failed_results)
        success_rate = (len(self.successful_results) / total * 100) if total > 0 else 0

        return {
            'successful': self.successful_results,
            'failed': self.failed_results,
            'total': total,
            'success_count': len(self.successful_results),
            'failed_count': len(self.failed_results),
            'success_rate': f"{success_rate:.1f}%"
        }

    def save_summary(self, summary: Dict[str, Any], output_path: Optional[Path] = None) -> Path:
        """Save processing summary to JSON (default: output_dir/processing_summary.json)."""
        if output_path is None:
            output_path = Path(self.config.directories.output_dir) / "processing_summary.json"
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(summary, f, indent=2)

        logger.info(f"Summary saved to: {output_path}")
        return output_path

    def process_directory(self, input_dir: Optional[Path] = None) -> Dict[str, Any]:
        """Clean all images in ``input_dir`` (default: the configured input dir)."""
        input_dir = Path(input_dir or self.config.directories.input_dir)
        suffix = self.config.output.whitelist_suffix.lower()
        image_files = [
            p for p in get_image_files(input_dir) if not p.name.lower().endswith(suffix)
        ]

        self.successful_results = []
        self.failed_results = []

        if not image_files:
            logger.warning(f"No images found in {input_dir}")
            return self._generate_summary()

        logger.info(f"Found {len(image_files)} images to clean")

        summary = self.process_batch(image_files)
        self.save_summary(summary)
        return summary
