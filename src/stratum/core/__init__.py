# src/stratum/core/__init__.py
"""
Core do Stratum.

Implementação pura e em memória da composição de overlays: nenhum módulo
deste pacote lê ou escreve arquivos de documentos (ver `stratum.io`).

Princípios fundamentais:
    - Nenhum input é mutado; todo merge e transform opera sobre clones
    - A mesma entrada sempre produz o mesmo result set
    - Falhas fatais são exceções tipadas; condições não fatais são
      diagnósticos devolvidos junto ao resultado
"""
