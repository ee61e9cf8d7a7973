"""Configuration module for the TCX HIIT Analyzer."""

import os
from typing import Dict, List
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config:
    """Configuration class for application settings."""

    # Directories
    DATA_DIR = os.getenv('DATA_DIR', 'data')
    SETTINGS_DIR = os.getenv('SETTINGS_DIR', 'settings')
    REPORT_DIR = os.getenv('REPORT_DIR', 'reports')

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

    # Default workout parameters
    DEFAULT_MAX_HR = int(os.getenv('DEFAULT_MAX_HR', '175'))
    DEFAULT_AGE = int(os.getenv('DEFAULT_AGE', '51'))
    DEFAULT_WEIGHT_KG = float(os.getenv('DEFAULT_WEIGHT_KG', '86'))
    DEFAULT_WARMUP_SECONDS = int(os.getenv('DEFAULT_WARMUP_SECONDS', '300'))
    DEFAULT_ACTIVE_SECONDS = int(os.getenv('DEFAULT_ACTIVE_SECONDS', '120'))
    DEFAULT_RECOVERY_SECONDS = int(os.getenv('DEFAULT_RECOVERY_SECONDS', '120'))
    DEFAULT_INTERVALS = int(os.getenv('DEFAULT_INTERVALS', '6'))
    DEFAULT_COOLDOWN_SECONDS = int(os.getenv('DEFAULT_COOLDOWN_SECONDS', '180'))
    DEFAULT_GENDER = os.getenv('DEFAULT_GENDER', 'male').lower()

    # Physiology constants
    RESTING_HR = 60
    HR_UPPER_LIMIT = 220
    FEMALE_CALORIE_FACTOR = 0.9

    # Zone fractions of max heart rate, zone N spans [N, N+1]
    ZONE_FRACTIONS: List[float] = [0.5, 0.6, 0.7, 0.8, 0.9, 1.0]

    ZONE_LABELS: Dict[str, str] = {
        'zone1': 'Recovery',
        'zone2': 'Aerobic',
        'zone3': 'Aerobic Threshold',
        'zone4': 'Lactate Threshold',
        'zone5': 'VO2 Max',
    }

    # Color mappings
    ZONE_COLORS: Dict[str, str] = {
        'zone1': os.getenv('COLOR_ZONE1', '#10B981'),
        'zone2': os.getenv('COLOR_ZONE2', '#3B82F6'),
        'zone3': os.getenv('COLOR_ZONE3', '#F59E0B'),
        'zone4': os.getenv('COLOR_ZONE4', '#EF4444'),
        'zone5': os.getenv('COLOR_ZONE5', '#8B5CF6'),
    }

    @classmethod
    def get_zone_color(cls, zone_key: str) -> str:
        """Get color for a given zone key.

        Args:
            zone_key: Zone key such as 'zone3'

        Returns:
            Hex color code
        """
        return cls.ZONE_COLORS.get(zone_key.lower(), '#888888')
