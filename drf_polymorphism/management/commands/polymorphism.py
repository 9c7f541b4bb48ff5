from textwrap import dedent

import yaml
from django.core.management.base import BaseCommand, CommandError
from rest_framework.renderers import JSONRenderer

from drf_polymorphism.drainage import GENERATOR_STATS, reset_generator_stats
from drf_polymorphism.hooks import get_candidate_types, rewrite_document
from drf_polymorphism.plumbing import UnableToProceedError
from drf_polymorphism.validation import validate_schema


class NoAliasDumper(yaml.SafeDumper):
    """ rewritten documents share schema dicts, which must not turn into yaml anchors """

    def ignore_aliases(self, data):
        return True


class Command(BaseCommand):
    help = dedent("""
        Express the registered polymorphic type hierarchies of an existing schema file
        with allOf/discriminator. Accepts Swagger 2.0 and OpenAPI 3 documents as well
        as bare type-keyed schema mappings, in YAML or JSON.

        Candidate base types are the response types of the API endpoints found in the
        URL conf. Register base types, subtypes and discriminators in the type registry
        configured with POLYMORPHISM_SETTINGS["TYPE_REGISTRY"].
    """)

    def add_arguments(self, parser):
        parser.add_argument('input', type=str, help='schema file to rewrite (YAML or JSON)')
        parser.add_argument('--format', dest="format", choices=['openapi', 'openapi-json'], default='openapi', type=str)
        parser.add_argument('--urlconf', dest="urlconf", default=None, type=str)
        parser.add_argument('--file', dest="file", default=None, type=str)
        parser.add_argument('--use-full-type-names', dest="use_full_type_names", default=None, action='store_true')
        parser.add_argument('--fail-on-warn', dest="fail_on_warn", default=False, action='store_true')
        parser.add_argument('--validate', dest="validate", default=False, action='store_true')
        parser.add_argument('--color', dest="color", default=False, action='store_true')

    def handle(self, *args, **options):
        if options['color']:
            GENERATOR_STATS.enable_color()
        reset_generator_stats()

        with open(options['input']) as fh:
            # JSON is a subset of YAML, so the safe loader handles both
            schema = yaml.load(fh, Loader=yaml.SafeLoader)
        if not isinstance(schema, dict):
            raise CommandError(f'"{options["input"]}" does not contain a schema document')

        try:
            rewrite_document(
                schema,
                get_candidate_types(urlconf=options['urlconf']),
                use_full_type_names=options['use_full_type_names'],
            )
        except UnableToProceedError as exc:
            raise CommandError(str(exc)) from exc

        GENERATOR_STATS.emit_summary()

        if options['fail_on_warn'] and GENERATOR_STATS:
            raise CommandError('Failing as requested due to warnings')
        if options['validate']:
            validate_schema(schema)

        output = self.render(schema, options['format'])

        if options['file']:
            with open(options['file'], 'w') as f:
                f.write(output)
        else:
            self.stdout.write(output)

    def render(self, schema, format) -> str:
        if format == 'openapi-json':
            return JSONRenderer().render(schema, renderer_context={'indent': 4}).decode()
        return yaml.dump(
            schema,
            Dumper=NoAliasDumper,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
