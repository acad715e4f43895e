ENHANCE_SYSTEM_PROMPT = """
You are a senior software architect helping hackathon teams. You will receive a builder prompt
for a hackathon project. Enhance it by:

1. Adding specific architectural patterns that fit the tech stack (e.g. App Router patterns for
   Next.js, middleware patterns for Express, dependency injection for FastAPI).
2. Adding 3-5 concrete database schema suggestions with field names and types.
3. Adding specific API endpoint paths with HTTP methods.
4. Adding a "Quick Wins" section with 3 things the team can build in the first hour.
5. Adding a "Common Pitfalls" section with 3 mistakes to avoid for this stack.

Return the COMPLETE enhanced prompt in Markdown. Do not remove any existing content; only add to it.
"""

FULL_SCAFFOLD_INSTRUCTIONS = """## Output Instructions

Please generate the following in order:

1. **Project scaffold**: folder structure, package manifest, config files, .env.example
2. **Database models/schema**: full schema definitions with validation
3. **API route stubs**: endpoint files with request/response types and placeholder logic
4. **Frontend page structure**: routing setup, layout components, page shells
5. **Core feature implementation**: start with the Phase 1 tasks from the timeline above

Use TypeScript if the tech stack includes it. Add brief comments explaining architectural decisions. Keep code production-ready but pragmatic; this is a hackathon, not enterprise software."""

BACKEND_FIRST_INSTRUCTIONS = """## Output Instructions

Please generate the backend foundation in this order:

1. **Project setup**: initialize the backend with the specified stack, including dependency manifest and environment configuration.
2. **Database connection**: connection module with pooling and error handling.
3. **Database models/schema**: complete schema definitions for all entities, with validation, indexes and relationships.
4. **Authentication**: auth middleware, JWT or session setup, login/register endpoints.
5. **API routes**: full CRUD endpoints for each entity with error handling, input validation and structured responses.
6. **Business logic**: core service functions for the main feature described in the solution.
7. **Seed data script**: a script to populate the database with realistic test data.

Keep the code modular: one file per model, one file per route group, shared utilities extracted."""

FRONTEND_FIRST_INSTRUCTIONS = """## Output Instructions

Please generate the frontend foundation in this order:

1. **Project setup**: initialize with the specified frontend framework, including routing and global styles/theme.
2. **Component architecture**: a component tree showing the hierarchy of pages and shared components.
3. **Layout components**: app shell, navigation, sidebar (if applicable), footer. Make them responsive.
4. **Page shells**: route-connected page components with placeholder content for each feature.
5. **Core UI components**: forms, cards, lists and modals for the primary user flow.
6. **API integration layer**: HTTP client with typed request/response functions. Use mock data until the backend is ready.
7. **State management**: global state setup for auth and core data.

Prioritize the primary user journey, the flow that will be demoed to judges."""

VARIANT_INSTRUCTIONS = {
    "full-scaffold": FULL_SCAFFOLD_INSTRUCTIONS,
    "backend-first": BACKEND_FIRST_INSTRUCTIONS,
    "frontend-first": FRONTEND_FIRST_INSTRUCTIONS,
}
