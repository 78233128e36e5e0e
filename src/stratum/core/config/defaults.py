# src/stratum/core/config/defaults.py
"""
Configuração embutida (defaults) do composer do Stratum.

Este módulo declara a base canônica sobre a qual arquivos de defaults e
overrides locais são aplicados via `deep_merge`.

Tabelas declaradas:
    - identity: onde ler `kind` e `name` de um documento
    - merge: estratégia padrão de sequências e paths com merge por identidade
    - labels / annotations: field specs onde labels e annotations comuns
      são escritos (metadata, selectors, templates)
    - references: onde documentos referenciam outros por nome, por tipo alvo
    - fields: paths bem conhecidos (réplicas)

Field specs usam paths pontuados. Sequências encontradas no caminho são
atravessadas implicitamente (cada elemento recebe o restante do path).
`create: true` cria os mapas intermediários ausentes; `create: false`
escreve apenas quando o mapa pai já existe no documento. `anchor` limita
`create: true` a documentos onde o prefixo indicado já existe: templates
recebem `metadata.labels` mesmo sem `metadata`, mas nenhum documento ganha
um `spec.template` inventado.
"""

from typing import Any, Dict


_POD_SPECS = (
    "spec.template.spec",
    "spec.jobTemplate.spec.template.spec",
    "spec",
)


def _pod_paths(*suffixes: str) -> list:
    # ordem estável: workloads, cronjobs, pods
    return [f"{prefix}.{suffix}" for prefix in _POD_SPECS for suffix in suffixes]


DEFAULT_CONFIG: Dict[str, Any] = {
    "document": {
        "max_depth": 100,
    },
    "identity": {
        "kind_field": "kind",
        "name_path": "metadata.name",
    },
    "merge": {
        # replace | identity
        "sequence_strategy": "replace",
        "identity_sequence_paths": [],
        "element_key_fields": ["name"],
    },
    "labels": {
        "field_specs": [
            {"path": "metadata.labels", "create": True},
            {"path": "spec.selector", "kinds": ["Service", "ReplicationController"], "create": False},
            {
                "path": "spec.selector.matchLabels",
                "kinds": ["Deployment", "ReplicaSet", "StatefulSet", "DaemonSet", "Job"],
                "create": False,
            },
            {"path": "spec.template.metadata.labels", "create": True, "anchor": "spec.template"},
            {
                "path": "spec.jobTemplate.metadata.labels",
                "kinds": ["CronJob"],
                "create": True,
                "anchor": "spec.jobTemplate",
            },
            {"path": "spec.jobTemplate.spec.selector.matchLabels", "kinds": ["CronJob"], "create": False},
            {
                "path": "spec.jobTemplate.spec.template.metadata.labels",
                "kinds": ["CronJob"],
                "create": True,
                "anchor": "spec.jobTemplate.spec.template",
            },
        ],
    },
    "annotations": {
        "field_specs": [
            {"path": "metadata.annotations", "create": True},
            {"path": "spec.template.metadata.annotations", "create": True, "anchor": "spec.template"},
            {
                "path": "spec.jobTemplate.spec.template.metadata.annotations",
                "kinds": ["CronJob"],
                "create": True,
                "anchor": "spec.jobTemplate.spec.template",
            },
        ],
    },
    "references": [
        {
            "kind": "ConfigMap",
            "paths": _pod_paths(
                "volumes.configMap.name",
                "containers.env.valueFrom.configMapKeyRef.name",
                "containers.envFrom.configMapRef.name",
                "initContainers.env.valueFrom.configMapKeyRef.name",
                "initContainers.envFrom.configMapRef.name",
            ),
        },
        {
            "kind": "Secret",
            "paths": _pod_paths(
                "volumes.secret.secretName",
                "containers.env.valueFrom.secretKeyRef.name",
                "containers.envFrom.secretRef.name",
                "initContainers.env.valueFrom.secretKeyRef.name",
                "initContainers.envFrom.secretRef.name",
                "imagePullSecrets.name",
            ),
        },
        {
            "kind": "ServiceAccount",
            "paths": _pod_paths("serviceAccountName"),
        },
        {
            "kind": "PersistentVolumeClaim",
            "paths": _pod_paths("volumes.persistentVolumeClaim.claimName"),
        },
        {
            "kind": "Service",
            "paths": [
                "spec.serviceName",
                "spec.rules.http.paths.backend.service.name",
                "spec.defaultBackend.service.name",
            ],
        },
    ],
    "fields": {
        "replicas_path": "spec.replicas",
    },
}
