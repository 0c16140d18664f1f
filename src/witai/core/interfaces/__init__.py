"""Interfaces/abstracciones del core.

Por qué:
- Define contratos (Protocol) que implementan adaptadores concretos.
- Permite invertir dependencias: el core depende de abstracciones.
"""
