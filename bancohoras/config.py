"""
Persistência da configuração em JSON local.

Formato:
  {"schedule": {...}, "employees": {"<pis>": {...}}}
Horários são gravados como "HH:MM".
"""
import json
import logging
import os
from datetime import time
from typing import Dict, Tuple

from bancohoras.models import ScheduleConfig

logger = logging.getLogger(__name__)


CONFIG_FILE = os.path.join(os.path.dirname(__file__), '..', 'config.json')

_TIME_FIELDS = ('entry_time', 'exit_time', 'lunch_start', 'lunch_end', 'daily_quota')


def parse_hhmm(value: str) -> time:
    """Converte "HH:MM" em time. Levanta ValueError se inválido."""
    h, m = value.strip().split(':')
    return time(int(h), int(m))


def schedule_to_dict(schedule: ScheduleConfig) -> dict:
    data = {name: getattr(schedule, name).strftime('%H:%M') for name in _TIME_FIELDS}
    data.update({
        'tolerance': schedule.tolerance_minutes,
        'exit_tolerance': schedule.exit_tolerance_minutes,
        'lunch_duration': schedule.lunch_duration_minutes,
        'require_lunch': schedule.require_lunch,
        'tolerance_absorbs_balance': schedule.tolerance_absorbs_balance,
        'special_exit_types': list(schedule.special_exit_types),
    })
    return data


def schedule_from_dict(data: dict) -> ScheduleConfig:
    """Monta um ScheduleConfig; campos ausentes ficam com o valor padrão."""
    schedule = ScheduleConfig()
    for name in _TIME_FIELDS:
        if name in data:
            setattr(schedule, name, parse_hhmm(data[name]))

    schedule.tolerance_minutes = int(data.get('tolerance', schedule.tolerance_minutes))
    schedule.exit_tolerance_minutes = int(data.get('exit_tolerance', schedule.exit_tolerance_minutes))
    schedule.lunch_duration_minutes = int(data.get('lunch_duration', schedule.lunch_duration_minutes))
    schedule.require_lunch = bool(data.get('require_lunch', schedule.require_lunch))
    schedule.tolerance_absorbs_balance = bool(
        data.get('tolerance_absorbs_balance', schedule.tolerance_absorbs_balance)
    )
    if 'special_exit_types' in data:
        schedule.special_exit_types = list(data['special_exit_types'])
    return schedule


def load_config(path: str = CONFIG_FILE) -> Tuple[ScheduleConfig, Dict[str, ScheduleConfig]]:
    """
    Carrega a configuração padrão e os overrides por PIS.

    Arquivo inexistente ou inválido resulta na configuração padrão.
    """
    config_path = os.path.abspath(path)
    if not os.path.exists(config_path):
        return ScheduleConfig(), {}

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            config = json.load(f)
        default = schedule_from_dict(config.get('schedule', {}))
        overrides = {
            pis: schedule_from_dict(data)
            for pis, data in config.get('employees', {}).items()
        }
    except (OSError, ValueError, TypeError, AttributeError) as e:
        logger.warning("Configuração ignorada (%s): %s", config_path, e)
        return ScheduleConfig(), {}

    return default, overrides


def save_config(
    path: str,
    default: ScheduleConfig,
    overrides: Dict[str, ScheduleConfig] = None
):
    """Salva a configuração padrão e os overrides por PIS."""
    config = {
        'schedule': schedule_to_dict(default),
        'employees': {
            pis: schedule_to_dict(schedule)
            for pis, schedule in (overrides or {}).items()
        },
    }
    config_path = os.path.abspath(path)
    with open(config_path, 'w', encoding='utf-8') as f:
        json.dump(config, f, indent=2, ensure_ascii=False)
