from __future__ import annotations
import argparse, logging, mimetypes, os
from learning_core.formatting import format_file_size
from learning_core.scheduler import ManualScheduler
from learning_core.store import LearningPlatform
from learning_core.types import FileMetadata


def file_metadata(path: str) -> FileMetadata:
    mime = mimetypes.guess_type(path)[0] or "application/octet-stream"
    return FileMetadata(name=os.path.basename(path), size=os.path.getsize(path), type=mime)


def main():
    ap = argparse.ArgumentParser(description="Simulate uploading local documents.")
    ap.add_argument("paths", nargs="+")
    ap.add_argument("--step", type=float, default=0.2, help="virtual seconds per progress print")
    ap.add_argument("--generate", action="store_true", help="create an assessment per finished document")
    a = ap.parse_args()
    logging.basicConfig(level=logging.WARNING, format="[%(levelname)s] %(message)s")

    scheduler = ManualScheduler()
    platform = LearningPlatform(scheduler=scheduler)
    platform.subscribe(lambda note: print(f"** {note.title}: {note.description}"))

    accepted, rejected = platform.submit_documents(file_metadata(p) for p in a.paths)
    print(f"Accepted {len(accepted)}, rejected {len(rejected)}")
    while scheduler.pending():
        scheduler.advance(a.step)
        line = "  ".join(f"{d.name}:{d.status}:{round(d.progress)}%" for d in platform.documents)
        print(f"t={scheduler.now():5.1f}s  {line}")

    for d in platform.documents:
        print(f"{d.name} ({format_file_size(d.size)}): {d.questions_generated} questions")
        if a.generate:
            print(f"  -> {platform.generate_from_document(d.id).title}")


if __name__ == "__main__": main()
