# tests/conftest.py
"""
Fixtures compartilhados para testes do Stratum.

Este módulo define fixtures reutilizáveis que fornecem:
- documentos base mínimos e determinísticos (ConfigMap, Deployment, Service)
- settings padrão do composer
- contexto de composição controlado (CompositionContext)
- um transform dummy duck-typed para testes estruturais do pipeline

Decisões arquiteturais:
    - Documentos são fornecidos como dicts brutos; cada teste decide
      quando convertê-los em `Document`
    - Fixtures devolvem objetos novos a cada uso (sem estado compartilhado)
    - Imports do core são feitos de forma lazy para melhorar a clareza
      de erros durante falhas

Invariantes:
    - Nenhuma fixture executa composição
    - Nenhuma fixture realiza I/O

Limites explícitos:
    - Não substituir testes de integração
    - Não conter lógica condicional complexa
"""

import pytest


# =====================================================
# Documentos base
# =====================================================

@pytest.fixture
def configmap_cfg() -> dict:
    """ConfigMap `cfg` com dois valores, referenciado pelo Deployment `web`."""
    return {
        "apiVersion": "v1",
        "kind": "ConfigMap",
        "metadata": {"name": "cfg"},
        "data": {"LOG_LEVEL": "info", "DB_URL": "jdbc://SHARED"},
    }


@pytest.fixture
def deployment_web() -> dict:
    """
    Deployment `web` com selector, template e duas referências.

    Referências declaradas:
        - ConfigMap `cfg` (envFrom e volume) → interna ao conjunto base
        - Secret `db-creds` (volume) → externa ao conjunto base
    """
    return {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": {"name": "web", "labels": {"app": "web"}},
        "spec": {
            "replicas": 1,
            "selector": {"matchLabels": {"app": "web"}},
            "template": {
                "metadata": {"labels": {"app": "web"}},
                "spec": {
                    "containers": [
                        {
                            "name": "app",
                            "image": "web:1.0",
                            "envFrom": [{"configMapRef": {"name": "cfg"}}],
                        },
                        {"name": "sidecar", "image": "proxy:2.0"},
                    ],
                    "volumes": [
                        {"name": "config", "configMap": {"name": "cfg"}},
                        {"name": "creds", "secret": {"secretName": "db-creds"}},
                    ],
                },
            },
        },
    }


@pytest.fixture
def service_web() -> dict:
    return {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": {"name": "web"},
        "spec": {"selector": {"app": "web"}, "ports": [{"port": 80, "targetPort": 8080}]},
    }


@pytest.fixture
def base_documents(configmap_cfg, deployment_web, service_web) -> list:
    """Base canônica dos testes: ConfigMap, Deployment e Service, nesta ordem."""
    return [configmap_cfg, deployment_web, service_web]


# =====================================================
# Settings e contexto
# =====================================================

@pytest.fixture
def settings():
    from stratum.core.config.settings import default_settings

    return default_settings()


@pytest.fixture
def ctx():
    """
    Contexto de composição determinístico para testes.

    `composition_id` é fixo; `created_at` é o instante da criação (não
    participa de nenhum resultado comparado pelos testes).
    """
    from stratum.core.composer.context import new_context

    return new_context("test", composition_id="comp-test-001", source="pytest")


@pytest.fixture
def DummyTransform():
    """
    Fixture factory que fornece um transform mínimo e duck-typed.

    O transform retornado adiciona `note: <value>` em `metadata` dos
    documentos em escopo, sem herdar de nenhuma base do core.
    """
    from stratum.core.document.identity import identity_of
    from stratum.core.document.model import Document, clone_node
    from stratum.core.transforms.base import ALL_DOCUMENTS
    from stratum.core.transforms.types import TransformKind

    class _DummyTransform:
        kind = TransformKind.SET_FIELD

        def __init__(self, value="dummy", scope=ALL_DOCUMENTS):
            self.value = value
            self.scope = scope

        def run(self, documents, ctx):
            out = []
            for doc in documents:
                if not self.scope.matches(identity_of(doc)):
                    out.append(doc)
                    continue
                body = clone_node(doc.body)
                body["metadata"]["note"] = self.value
                out.append(Document(body=body))
            return out

    return _DummyTransform


# =====================================================
# Config loader fixtures
# =====================================================

@pytest.fixture
def project_defaults_yaml() -> str:
    """
    YAML de defaults de projeto, aplicado sobre `DEFAULT_CONFIG`.

    Habilita merge por identidade em `spec.template.spec.containers` e
    reduz o limite de profundidade.
    """
    return """\
document:
  max_depth: 50
merge:
  identity_sequence_paths:
    - spec.template.spec.containers
"""


@pytest.fixture
def project_local_yaml() -> str:
    """YAML de override local: troca a estratégia global de sequências."""
    return """\
merge:
  sequence_strategy: identity
fields:
  replicas_path: spec.instances
"""
