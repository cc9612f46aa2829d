"""
Ядро LP vault: ошибки, доменные модели, целочисленная математика, контракты.

Ни один модуль ядра не обращается к пулу или ledger'ам напрямую: всё
внешнее приходит сюда как PoolState или как аргументы функций.
"""
