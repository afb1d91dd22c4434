"""Seed vocabulary for the spelling catalog.

Run: python -m scripts.seed_catalog [--storage file|postgres]
"""

import argparse
import logging

from server.storage import create_storage

AUDIO_BASE = 'audio'

# {difficulty: {word: syllable_count}}
SEED_WORDS = {
    'easy': {
        'cat': 1, 'dog': 1, 'sun': 1, 'hat': 1, 'fish': 1, 'tree': 1,
        'book': 1, 'milk': 1, 'frog': 1, 'jump': 1, 'apple': 2, 'happy': 2
    },
    'medium': {
        'garden': 2, 'pencil': 2, 'window': 2, 'rabbit': 2, 'kitchen': 2,
        'yellow': 2, 'basket': 2, 'banana': 3, 'family': 3, 'tomorrow': 3,
        'elephant': 3, 'umbrella': 3
    },
    'difficult': {
        'rhythm': 2, 'knight': 1, 'psalm': 1, 'gnome': 1, 'foreign': 2,
        'receipt': 2, 'necessary': 4, 'separate': 3, 'definitely': 4,
        'conscience': 2, 'rhinoceros': 4, 'mischievous': 3, 'occasionally': 5,
        'onomatopoeia': 6, 'unbelievable': 5, 'responsibility': 6,
        'extraordinarily': 6, 'characteristically': 7
    }
}

# Not yet narrated, so never selected
UNNARRATED = {'tomorrow', 'psalm', 'characteristically'}


def get_seed_words() -> list[dict]:
    """Seed catalog rows as {word, narration_asset, syllable_count, difficulty} dicts."""
    words = []
    for difficulty, items in SEED_WORDS.items():
        for word, syllables in items.items():
            words.append({
                'word': word,
                'narration_asset': None if word in UNNARRATED else f'{AUDIO_BASE}/{word}.mp3',
                'syllable_count': syllables,
                'difficulty': difficulty
            })
    return words


def main():
    parser = argparse.ArgumentParser(description='Seed the spelling word catalog')
    parser.add_argument('--storage', choices=['postgres', 'file'], default=None)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    storage = create_storage(args.storage)
    count = storage.seed_catalog(get_seed_words())
    print(f"Seeded {count} catalog words")


if __name__ == '__main__':
    main()
