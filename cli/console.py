"""Console output for the spellol daily CLI."""

from core.config import DIFFICULTIES
from cli.api_client import SpellolAPIClient


class ConsoleUI:
    """Console user interface for the daily rotation server."""

    def __init__(self, client: SpellolAPIClient):
        self.client = client

    def print_daily(self, daily: dict):
        """Print the active set grouped by difficulty."""
        print('\n' + '=' * 60)
        print(f'ACTIVE DAILY SET ({daily["total"]} words)')
        print('=' * 60)
        by_difficulty = {}
        for word in daily['words']:
            by_difficulty.setdefault(word['difficulty'], []).append(word)
        for difficulty in DIFFICULTIES:
            words = by_difficulty.get(difficulty)
            if not words:
                continue
            print(f'\n{difficulty.upper()}')
            for word in words:
                audio = 'audio' if word['narration_asset'] else 'no audio'
                print(f'  {word["word"]:<20} {word["syllable_count"]} syl  '
                      f'{audio:<8}  since {word["created_at"]}')
        print('=' * 60 + '\n')

    def print_rotation_event(self, event: dict):
        """Print one rotation.run event."""
        data = event.get('data') or {}
        print('-' * 40)
        print(f'{event["timestamp"]}  {event["event"]}')
        if data:
            print(f'  Inserted: {len(data.get("inserted", []))}/{data.get("requested", 0)}')
            if data.get('inserted'):
                print(f'  Words: {", ".join(data["inserted"])}')
            if data.get('duplicates'):
                print(f'  Duplicates skipped: {", ".join(data["duplicates"])}')
            for outcome in data.get('outcomes', []):
                if outcome.get('error'):
                    print(f'  Failed {outcome["request"]["difficulty"]}: {outcome["error"]}')
                elif outcome.get('shortfall'):
                    print(f'  Short {outcome["request"]["difficulty"]} by {outcome["shortfall"]}')

    def rotate(self):
        health = self.client.health_check()
        print(f"Connected to {health['service']}")
        result = self.client.rotate()
        print(f"Rotation: {result['status']}")
        self.show_daily()

    def show_daily(self, difficulty: str = None):
        self.print_daily(self.client.get_daily(difficulty))

    def show_events(self, limit: int = 10):
        result = self.client.get_recent_events('rotation.run', limit)
        if 'error' in result:
            print(result['error'])
            return
        if not result['events']:
            print('No rotation events recorded yet.')
            return
        for event in result['events']:
            self.print_rotation_event(event)
        print('-' * 40)
