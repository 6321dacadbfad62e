# File: cms/seed.py
# Purpose: Charger les paramètres système par défaut depuis data/system_parameters.yml
#          et les insérer si la table est vide.

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List

import yaml
from sqlalchemy.exc import IntegrityError

from .db import Store
from .models import PARAMETER_TYPES, SystemParameter
from .services.parameters import ParameterValueError, validate_definition, validate_value

log = logging.getLogger(__name__)

# Emplacement par défaut du YAML
CONFIG_PATH = (
    Path(__file__)
    .resolve()
    .parent        # cms/
    / "data"
    / "system_parameters.yml"
)


def _default_parameters() -> List[Dict[str, Any]]:
    """Fallback si le YAML est manquant ou invalide."""
    return [
        {
            "key": "siteName",
            "name": "站点名称",
            "description": "网站显示的名称",
            "value": "PonyMind",
            "type": "string",
            "category": "基本设置",
            "options": None,
            "min": None,
            "max": None,
            "unit": None,
            "is_required": True,
            "is_editable": True,
            "default_value": "PonyMind",
        },
        {
            "key": "maintenanceMode",
            "name": "维护模式",
            "description": "启用后，只有管理员可以访问网站",
            "value": False,
            "type": "boolean",
            "category": "系统设置",
            "options": None,
            "min": None,
            "max": None,
            "unit": None,
            "is_required": True,
            "is_editable": True,
            "default_value": False,
        },
    ]


def load_parameters_config(path: Path | None = None) -> List[Dict[str, Any]]:
    """Charge la config YAML des paramètres.

    Retourne une liste de dicts prêts à être insérés en DB.
    En cas de problème, on retourne un set de paramètres par défaut.
    """
    path = path or CONFIG_PATH

    if not path.exists():
        log.warning("system_parameters.yml introuvable (%s), utilisation des defaults.", path)
        return _default_parameters()

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        log.error("Erreur lors du chargement de %s: %s", path, e)
        return _default_parameters()

    items = raw.get("parameters") if isinstance(raw, dict) else None
    if not isinstance(items, list):
        log.error("system_parameters.yml: 'parameters' n'est pas une liste, utilisation des defaults.")
        return _default_parameters()

    cleaned: List[Dict[str, Any]] = []
    seen: set[str] = set()
    for it in items:
        if not isinstance(it, dict):
            continue

        key = str(it.get("key") or "").strip()
        ptype = it.get("type")
        if not key or key in seen or ptype not in PARAMETER_TYPES:
            continue
        seen.add(key)

        cleaned.append(
            {
                "key": key,
                "name": it.get("name") or key,
                "description": it.get("description") or "",
                "value": it.get("value"),
                "type": ptype,
                "category": it.get("category") or "general",
                "options": it.get("options") or None,
                "min": it.get("min"),
                "max": it.get("max"),
                "unit": it.get("unit"),
                "is_required": bool(it.get("is_required", False)),
                "is_editable": bool(it.get("is_editable", True)),
                # By default the shipped value is also the reset target
                "default_value": it.get("default_value", it.get("value")),
            }
        )

    if not cleaned:
        log.warning("system_parameters.yml ne contient aucun paramètre valide, utilisation des defaults.")
        return _default_parameters()

    return cleaned


def ensure_parameters_seeded(store: Store, path: Path | None = None) -> int:
    """Insère les paramètres par défaut si la table est vide.

    Appelée au démarrage de l'app (create_app). Retourne le nombre inséré.
    """
    with store.session() as s:
        existing = s.query(SystemParameter).count()
        if existing > 0:
            log.info("ensure_parameters_seeded: %s paramètres déjà présents.", existing)
            return 0

        inserted = 0
        for d in load_parameters_config(path):
            param = SystemParameter(**d)
            try:
                validate_definition(param)
            except ParameterValueError as e:
                log.error("Paramètre ignoré: %s", e)
                continue
            if not validate_value(param, param.value):
                log.error("Paramètre ignoré: %s, valeur invalide %r", param.key, param.value)
                continue
            if param.default_value is not None and not validate_value(param, param.default_value):
                log.error("Paramètre ignoré: %s, valeur par défaut invalide %r", param.key, param.default_value)
                continue
            s.add(param)
            inserted += 1

        try:
            s.commit()
        except IntegrityError:
            # Un autre worker a seedé la table entre le count() et le commit
            s.rollback()
            log.warning("ensure_parameters_seeded: table déjà seedée par un autre process.")
            return 0

    log.info("ensure_parameters_seeded: %s paramètres insérés.", inserted)
    return inserted
