from django.core.checks import Warning, register


@register(deploy=True)
def type_registry_check(app_configs, **kwargs):
    """ Inspect declared type hierarchies for entries the rewriter cannot express """
    from drf_polymorphism.plumbing import get_qualified_name
    from drf_polymorphism.registry import TypeRegistry
    from drf_polymorphism.settings import polymorphism_settings

    if not polymorphism_settings.ENABLE_DJANGO_DEPLOY_CHECK:
        return []

    registry = polymorphism_settings.TYPE_REGISTRY
    # custom adapters only expose queries, so there is nothing to enumerate
    if not isinstance(registry, TypeRegistry):
        return []

    errors = []
    for base_type in registry:
        name = get_qualified_name(base_type)
        subtypes = registry.get_subtypes(base_type)
        if base_type in subtypes:
            errors.append(Warning(
                f'"{name}" is declared as its own subtype. Its schema would be corrupted '
                f'by the polymorphism rewrite.',
                id='drf_polymorphism.W001',
            ))
        if subtypes and not registry.get_discriminator_name(base_type):
            errors.append(Warning(
                f'"{name}" declares subtypes but no discriminator. The hierarchy will not be '
                f'expressed in the schema.',
                id='drf_polymorphism.W002',
            ))
    return errors
