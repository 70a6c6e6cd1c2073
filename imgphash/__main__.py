"""
Allow running the package with: python -m imgphash

Examples:
    python -m imgphash hash photo.jpg          # Print fingerprint
    python -m imgphash distance 12 13          # Compare two fingerprints
    python -m imgphash compare a.jpg b.jpg     # Hash and compare two images
    python -m imgphash config                  # Show effective configuration
    python -m imgphash config --init           # Create example config file
"""

import sys


def show_config(args: list[str]) -> int:
    from .user_config import get_user_config

    config = get_user_config()

    if '--init' in args or '-i' in args:
        if config.create_example_config():
            print("✓ Created example configuration file at:")
            print(f"  {config.config_file_path}")
            print("\nEdit this file to customize imgphash settings.")
            return 0
        print("✗ Failed to create configuration file.")
        return 1

    print(f"Configuration file: {config.config_file_path}")
    if config.config_file_path.exists():
        print("Status: ✓ Found")
    else:
        print("Status: ✗ Not found (using defaults)")
        print("\nRun 'python -m imgphash config --init' to create one.")

    print("\nCurrent settings:")
    print(f"  default_workers: {config.default_workers}")
    print(f"  default_threshold: {config.default_threshold}")
    print(f"  max_image_pixels: {config.max_image_pixels:,}")
    return 0


def main(argv=None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    if argv and argv[0] == 'config':
        return show_config(argv[1:])

    from .cli import main as cli_main
    return cli_main(argv)


if __name__ == '__main__':
    sys.exit(main())
