"""CLI script to load lessons from a JSON file into the backend DB.
Usage: python scripts/seed_lessons.py [FILE] [--replace]

FILE holds one lesson object or a list of them, in the same camelCase
shape the API accepts. Defaults to `scripts/sample_lessons.json`.
"""
import sys
import argparse
import json
import pathlib
# Ensure `backend/` is on sys.path so `lesson_service` imports work when running this script directly
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
import pydantic
from sqlmodel import Session
from lesson_service import services
from lesson_service.database import create_db_and_tables, engine
from lesson_service.errors import LessonServiceError
from lesson_service.schemas import LessonCreate

DEFAULT_FILE = pathlib.Path(__file__).resolve().parent / 'sample_lessons.json'


def load_lessons(path: pathlib.Path) -> list:
    """Read `path` and return a list of raw lesson dicts."""
    data = json.loads(path.read_text(encoding='utf-8'))
    return data if isinstance(data, list) else [data]


def main(path: pathlib.Path = DEFAULT_FILE, replace: bool = False, bind=None) -> dict:
    """Create every lesson found in `path`.

    Lessons whose id already exists are skipped, or updated in place when
    `replace` is True. Results are printed to stdout and returned as a
    summary dict.
    """
    bind = bind if bind is not None else engine
    create_db_and_tables(bind)
    summary = {'created': 0, 'updated': 0, 'skipped': 0, 'errors': []}
    with Session(bind) as session:
        svc = services.LessonService(session)
        for idx, raw in enumerate(load_lessons(path)):
            try:
                payload = LessonCreate.model_validate(raw)
            except pydantic.ValidationError as e:
                summary['errors'].append({'index': idx, 'error': str(e)})
                print(f'Invalid lesson at index {idx}: {e}')
                continue
            try:
                if svc.lesson_repo.exists(payload.id):
                    if not replace:
                        summary['skipped'] += 1
                        print(f'Skipped existing lesson {payload.id}')
                        continue
                    svc.update(payload.id, payload)
                    summary['updated'] += 1
                    print(f'Updated lesson {payload.id}')
                else:
                    svc.create(payload)
                    summary['created'] += 1
                    print(f'Created lesson {payload.id} with {len(payload.questions)} questions')
            except LessonServiceError as e:
                summary['errors'].append({'index': idx, 'error': e.message})
                print(f'Error loading lesson {payload.id}: {e.message}')
    print(f"Created {summary['created']}, updated {summary['updated']}, skipped {summary['skipped']}, errors {len(summary['errors'])}")
    return summary


if __name__ == '__main__':
    parser = argparse.ArgumentParser()
    parser.add_argument('file', nargs='?', type=pathlib.Path, default=DEFAULT_FILE, help='JSON file with one lesson or a list')
    parser.add_argument('--replace', action='store_true', help='Update lessons whose id already exists')
    args = parser.parse_args()
    main(args.file, replace=args.replace)
