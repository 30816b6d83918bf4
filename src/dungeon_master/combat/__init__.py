from .damage import ExchangeResult, attack_monster, compute_damage, monster_counter, resolve_exchange

__all__ = ["ExchangeResult", "attack_monster", "compute_damage", "monster_counter", "resolve_exchange"]
