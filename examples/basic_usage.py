"""Basic usage example for the scan cleaner."""

from pathlib import Path

from scan_cleaner import ArtifactParams, clean_artifacts
from scan_cleaner.processors import load_image, save_image


def main():
    """Clean one scan with slightly stronger ink protection."""

    source = Path("input/scan.png")
    if not source.exists():
        print(f"Put a scan at {source} and run again.")
        return

    params = ArtifactParams(brightness_threshold=75, structuring_element_size=31)
    raster = load_image(source)
    result = clean_artifacts(raster, params)

    save_image(result.cleaned, Path("output/scan_cleaned.png"))
    save_image(result.visualization, Path("output/scan_visualization.png"))

    print("Scan Cleaner - Example")
    print("=" * 40)
    for key, value in result.stats.to_dict().items():
        if key != "thresholds":
            print(f"  {key}: {value}")


if __name__ == "__main__":
    main()
