"""
Offline parsing example.

Demonstrates converting a previously downloaded timed-text XML file to JSON.
"""

from captionkit import TimedTextParser

def main():
    parser = TimedTextParser()

    result = parser.parse_to_json(
        xml_file="captions.xml",
        output_file="captions.json"
    )

    print(f"Parsed {result['cues_count']} cues")
    print(f"Output saved to: {result['captions_path']}")

if __name__ == "__main__":
    main()
