"""OpenShift application deployer.

This module provides the OpenShiftDeployer class which sequences a complete
application deployment:

1. Validate the disabled deployer names (before any cluster call)
2. Connect to the cluster
3. Create the application route, whose host deployers may need
4. Resolve and run deployers, folding the variables they contribute
5. Apply the ImageStream and BuildConfig
6. Upload the build output directory and wait for the image build
7. Apply the application Deployment and Service
8. Wait for the rollout
9. Report the application URL

Every step failure aborts the deployment. Resources already applied are
left in place.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from loguru import logger

from ocpdeploy.config.config_data import DeploySettings
from ocpdeploy.deployers.base import Deployer, DeployerContext
from ocpdeploy.deployers.registry import DeployerRegistry
from ocpdeploy.deployers.resolver import (
    DeployerMatch,
    apply_deployers,
    merge_env,
    resolve,
)
from ocpdeploy.infra.k8s.controller import ClusterController
from ocpdeploy.utils.console_like import ConsoleLike

from .build import BuildCoordinator
from .models import DeploymentRequest, DeploymentResult
from .reconciler import ClusterReconciler
from .resources import (
    application_url,
    build_build_config,
    build_deployment,
    build_image_stream,
    build_route,
    build_service,
)


class OpenShiftDeployer:
    """Deploys one application per `deploy` call.

    Attributes:
        console: Output for user-facing notices
        controller: Cluster controller
        registry: Deployers available for this run
        settings: Namespace, builder image, archive path and timeouts
    """

    def __init__(
        self,
        console: ConsoleLike,
        controller: ClusterController,
        deployers: Iterable[Deployer] = (),
        settings: DeploySettings | None = None,
    ) -> None:
        self.console = console
        self.controller = controller
        self.registry = DeployerRegistry(deployers)
        self.settings = settings or DeploySettings()

    async def deploy(self, request: DeploymentRequest) -> DeploymentResult:
        """Deploy the application described by `request`.

        Raises:
            ConfigurationError: Unknown disabled deployer
            ClusterError: Connection, apply or build event stream failure
            BuildFailedError: The image build did not complete
            DeploymentTimeoutError: The application did not become ready in time
        """
        identity = request.identity
        self.registry.validate_disabled(request.disabled_deployers)

        context_name = await self.controller.connect()
        namespace = self.settings.namespace or await self.controller.default_namespace()
        self.console.info(
            f"Connected to OpenShift cluster (context {context_name}, namespace {namespace})"
        )
        reconciler = ClusterReconciler(
            self.controller,
            namespace,
            request.output_dir,
            poll_interval=self.settings.rollout_poll_interval,
        )

        # The route comes first: deployers may need its host
        await reconciler.apply(build_route(identity), identity.name)
        host = await reconciler.route_host(identity.name)
        logger.debug(f"Route host for {identity.name}: {host}")

        matches = resolve(
            self.registry, request.layers, request.add_ons, request.disabled_deployers
        )
        deployer_env = await apply_deployers(
            matches,
            console=self.console,
            host=host,
            app_name=identity.name,
            env=request.env,
            context_for=lambda match: self._deployer_context(
                match, reconciler, host, identity.name, request
            ),
        )

        await reconciler.apply(build_image_stream(identity), identity.name)
        await reconciler.apply(
            build_build_config(identity, self.settings.builder_image), identity.name
        )
        build_name = await BuildCoordinator(
            self.controller,
            self.console,
            namespace,
            timeout=self.settings.build_timeout,
        ).run(identity.build_config_name, request.output_dir, self.settings.archive_path)

        environment = merge_env(deployer_env, request.extra_env)
        self._report_environment(
            identity.name, environment, any(m.disabled for m in matches)
        )

        self.console.info("Deploying application image on OpenShift")
        await reconciler.apply(
            build_deployment(identity, environment, identity.ha), identity.name
        )
        await reconciler.apply(build_service(identity), identity.name)

        self.console.info("Waiting until the application is ready ...")
        await reconciler.wait_for_rollout(identity.name, self.settings.rollout_timeout)

        url = application_url(host, identity)
        self.console.ok(f"Application route: {url}")
        return DeploymentResult(
            url=url, host=host, environment=environment, build_name=build_name
        )

    def _deployer_context(
        self,
        match: DeployerMatch,
        reconciler: ClusterReconciler,
        host: str,
        app_name: str,
        request: DeploymentRequest,
    ) -> DeployerContext:
        return DeployerContext(
            console=self.console,
            reconciler=reconciler,
            controller=self.controller,
            namespace=reconciler.namespace,
            output_dir=request.output_dir,
            host=host,
            app_name=app_name,
            capability=match.capability,
            env=request.env,
        )

    def _report_environment(
        self, app_name: str, environment: Mapping[str, str], any_disabled: bool
    ) -> None:
        if not environment:
            return
        if any_disabled:
            self.console.warn(
                f"The following environment variables have been set in the {app_name} "
                "deployment. Some of them possibly need to be updated in the deployment:"
            )
        else:
            self.console.warn(
                f"The following environment variables have been set in the {app_name} deployment:"
            )
        for key, value in environment.items():
            self.console.warn(f"{key}={value}")
