"""
Video details example.

Demonstrates fetching title, description and subtitles, and saving them as JSON.
"""

import asyncio
import json
import logging

from captionkit import CaptionExtractor

# Configure logging to see captionkit internal logs
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

async def fetch(video_ids, lang):
    extractor = CaptionExtractor()
    try:
        return {
            video_id: await extractor.get_video_details(video_id, lang=lang, best_effort=True)
            for video_id in video_ids
        }
    finally:
        extractor.close()

def main():
    video_ids = ["dQw4w9WgXcQ", "fKxLbERmB4U"]

    results = asyncio.run(fetch(video_ids, lang="en"))

    for video_id, details in results.items():
        print(f"{video_id}: {details.title} ({len(details.subtitles)} cues)")

    with open("video_details.json", "w", encoding="utf-8") as f:
        json.dump({k: v.to_dict() for k, v in results.items()}, f, indent=2, ensure_ascii=False)
    print("Output saved to: video_details.json")

if __name__ == "__main__":
    main()
