# src/atlas_lifecycle/core/__init__.py
"""
Core do Atlas Lifecycle.

Componentes principais (folhas primeiro):
    - model        → estados, componentes, conexões e change sets
    - validation   → regras de campo (durações, cron, propriedades, auto-terminação)
    - graph        → conexões, grafo de referências e ordenação por dependência
    - registry     → registro de componentes e consultas de services
    - execution    → porta do engine de execução
    - guards       → Transition Guards por tipo de componente
    - coordinator  → Lifecycle Coordinator, cascatas e Configuration Applier
    - config       → resolução de settings (merge, hashing)
    - traceability → journal de decisões do coordenador

Princípios fundamentais:
    - Nenhuma decisão silenciosa: toda rejeição é tipada e serializável
    - Toda verificação acontece antes de qualquer mutação
    - Estado e efeitos colaterais são sempre rastreáveis

Limites explícitos:
    - Não executa lógica de negócio de processors
    - Não movimenta dados
    - Não persiste configuração de fluxo
"""
