#!/usr/bin/env python3
"""
SivaFS Example Script

This script demonstrates the basic usage of the SivaFS library.

Author: Tim Hosking
GitHub: https://github.com/Munger
"""

import argparse
import time

from sivafs import SivaFS, SivaFSError, read_file, write_file


def list_contents(fs, path):
    """List the contents of a directory inside the archive."""
    print(f"\nListing contents of: {path or '/'}")
    print("-" * 50)

    try:
        info = fs.stat(path)
        if info.is_dir:
            for item in fs.read_dir(path):
                if item.is_dir:
                    print(f"{item.name}/  (modified {time.ctime(item.mod_time)})")
                else:
                    print(f"{item.name} ({item.size} bytes)")
        else:
            print(f"File: {info.name}")
            print(f"Size: {info.size} bytes")
            print(f"Mode: {info.mode:o}")
            print(f"Modified: {time.ctime(info.mod_time)}")
    except FileNotFoundError:
        print(f"Path not found: {path}")
    except SivaFSError as e:
        print(f"Error: {e}")


def show_file(fs, path):
    """Read and display the contents of a file."""
    print(f"\nReading file: {path}")
    print("-" * 50)

    try:
        content = read_file(fs, path, encoding='utf-8')
        if len(content) > 500:
            print(content[:500] + "... (truncated)")
        else:
            print(content)
    except FileNotFoundError:
        print(f"File not found: {path}")
    except SivaFSError as e:
        print(f"Error: {e}")


def store_file(fs, path, content):
    """Write content to a file."""
    print(f"\nWriting to file: {path}")
    print("-" * 50)

    try:
        written = write_file(fs, path, content)
        print(f"Successfully wrote {written} bytes to {path}")
    except SivaFSError as e:
        print(f"Error: {e}")


def remove_file(fs, path):
    """Remove a file; the archive keeps its bytes and records a tombstone."""
    print(f"\nRemoving: {path}")
    print("-" * 50)

    try:
        fs.remove(path)
        print(f"Removed {path}")
    except SivaFSError as e:
        print(f"Error: {e}")


def populate(fs):
    """Add a few files in nested directories."""
    store_file(fs, "file1.txt", "This is file 1 content")
    store_file(fs, "docs/file2.txt", "This is file 2 content")
    store_file(fs, "docs/sub/file3.txt", "This is file 3 in a subdirectory")
    # Overwriting appends a new entry; readers see the latest one
    store_file(fs, "file1.txt", "This is file 1, second version")


def main():
    """Main function demonstrating SivaFS features."""
    parser = argparse.ArgumentParser(description="SivaFS Example Script")
    parser.add_argument("archive", help="Path of the siva archive (created if missing)")
    parser.add_argument("--list", metavar="PATH", help="List contents of a path")
    parser.add_argument("--read", metavar="PATH", help="Read a file")
    parser.add_argument("--write", nargs=2, metavar=("PATH", "CONTENT"), help="Write content to a file")
    parser.add_argument("--remove", metavar="PATH", help="Remove a file")
    parser.add_argument("--demo", action="store_true", help="Run a full demonstration")

    args = parser.parse_args()

    with SivaFS(args.archive) as fs:
        if args.list is not None:
            list_contents(fs, args.list)
        elif args.read:
            show_file(fs, args.read)
        elif args.write:
            store_file(fs, args.write[0], args.write[1])
        elif args.remove:
            remove_file(fs, args.remove)
        elif args.demo:
            populate(fs)
            list_contents(fs, "")
            list_contents(fs, "docs")
            show_file(fs, "file1.txt")
            remove_file(fs, "docs/sub/file3.txt")
            list_contents(fs, "docs")
            print("\nDemonstration complete!")
        else:
            parser.print_help()


if __name__ == "__main__":
    main()
