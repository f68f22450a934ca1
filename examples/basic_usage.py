"""
Basic CaptionKit usage example.

Demonstrates fetching the English subtitles of a YouTube video.
"""

import asyncio

from captionkit import get_subtitles

def main():
    video_id = "dQw4w9WgXcQ"

    print(f"Fetching subtitles for {video_id}...")
    cues = asyncio.run(get_subtitles(video_id, lang="en"))

    if not cues:
        print("No English captions available")
        return

    print(f"Fetched {len(cues)} cues")
    for cue in cues[:5]:
        print(f"[{cue.start:7.2f}s +{cue.dur:.2f}s] {cue.text}")

if __name__ == "__main__":
    main()
