"""Publishing framework for regenerated code artifacts.

This package owns everything between "a batch of formatted artifacts" and
"files on disk": the artifact model, the registry of the current pass, the
base/extension split, reference rewriting, conflict resolution and the
run orchestrator.

Common entrypoints:

- `regen_publisher.framework.orchestrator`: `RunOrchestrator.publish(batch, progress)`
- `regen_publisher.framework.batch`: load a batch manifest from YAML
- `regen_publisher.framework.config`: `PublishConfig.from_dict`

Host integration (directories, merge support, project refresh) is expressed
through the protocols in `regen_publisher.framework.shell`.
"""
