#!/usr/bin/env python3
"""
Seed Script: Load the demo video catalogue

Inserts four sample videos into the configured store backend
(STORE_BACKEND / FIRESTORE_COLLECTION_PREFIX). Ids that already exist are
left untouched, so the script is safe to re-run.

Usage:
    python scripts/seed_videos.py
"""

import sys
from pathlib import Path

# Add parent directory to path to import app modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.config import logger
from app.core.repositories.exceptions import AlreadyExistsError
from app.core.repositories.models import VideoMetadata
from app.core.store import create_store, system_clock

DEMO_UPLOADER = "2vxsx-fae"

# (video_id, title, tags, storage_ref, age in seconds)
DEMO_VIDEOS = [
    ("video1", "Big Buck Bunny", ["funny", "short"], "livepeer:dev-pb-1", 1000),
    ("video2", "Elephant's Dream", ["music", "dance"], "livepeer:dev-pb-2", 2000),
    ("video3", "Sintel", ["tutorial", "tech"], "livepeer:dev-pb-3", 3000),
    ("video4", "Tears of Steel", ["nature", "documentary"], "livepeer:dev-pb-4", 4000),
]


def main():
    """Run the seed."""
    logger.info("Seeding demo videos...")

    store = create_store()
    now = system_clock()
    created = 0

    try:
        for video_id, title, tags, storage_ref, age in DEMO_VIDEOS:
            metadata = VideoMetadata(
                video_id=video_id,
                uploader_principal=DEMO_UPLOADER,
                tags=tags,
                title=title,
                storage_ref=storage_ref,
                timestamp=now - age,
            )
            try:
                store.videos.create_video(metadata)
            except AlreadyExistsError:
                logger.info("  - %s already present, skipping", video_id)
                continue
            created += 1
            logger.info("  - %s (%s) tags=%s", video_id, title, ",".join(tags))

        logger.info("Seed completed: %d created, %d total videos", created, len(store.list_all_videos()))
        return 0

    except Exception as e:
        logger.error("Seed failed: %s", e, exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
