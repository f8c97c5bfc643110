class Templates:
    """Шаблоны для генерации файлов"""

    types_header = """// Auto-generated TypeScript types
// Do not modify manually."""

    params_header = """// Auto-generated TypeScript parameter interfaces
// Do not modify manually."""

    sdk_header = """// Auto-generated TypeScript SDK
// Do not modify manually."""

    shared_params = """/**
 * Date range filter. Every bound is sent as `<operator><ISO 8601 date>`.
 */
export interface DateRange {
  eq?: Date;
  gte?: Date;
  lte?: Date;
  gt?: Date;
  lt?: Date;
}

/**
 * Numeric range filter. `min` and `max` are sent together as `<min>..<max>`.
 */
export interface NumberRange {
  eq?: number;
  gte?: number;
  lte?: number;
  gt?: number;
  lt?: number;
  min?: number;
  max?: number;
}

/**
 * ISO 4217 currency code.
 */
export type CurrencyCode = string;

/**
 * Money range filter, every bound is prefixed with `<currency>:`.
 */
export interface CurrencyRange extends NumberRange {
  currency: CurrencyCode;
}

/**
 * Retry policy for SDK requests.
 */
export interface RetryOptions {
  retries?: number;
  retryDelay?: number;
  retryOn?: number[];
}"""

    support_imports = """import {{ InMemoryContext }} from './context';
import {{ {error_names} }} from './error';
import {{ toApiType, toClientType }} from './utils';
import {{ RequestInterceptor, ResponseInterceptor, InterceptorManager }} from './interceptors';"""

    named_imports = """import {{
{names}
}} from '{module}';"""

    sdk_version = "const SDK_VERSION = {version};"

    class_members = """private baseUrl: string;

public context: InMemoryContext;
public interceptors: {
  request: InterceptorManager<RequestInterceptor>;
  response: InterceptorManager<ResponseInterceptor>;
};"""

    constructor = """this.baseUrl = baseUrl;
this.context = new InMemoryContext();
this.interceptors = {
  request: new InterceptorManager<RequestInterceptor>(),
  response: new InterceptorManager<ResponseInterceptor>(),
};"""

    dispatch = """options = this.context.setHttpRequestHeaders(options);
// Apply request interceptors
for (const interceptor of this.interceptors.request.interceptors) {
  const result = await interceptor(options, finalUrl);
  if (result) {
    if (result.options) options = result.options;
    if (result.url) finalUrl = result.url;
  }
}

let response = await fetch(finalUrl, options);
// Apply response interceptors
for (const interceptor of this.interceptors.response.interceptors) {
  const result = await interceptor(response, options, finalUrl);
  if (result) {
    response = result;
  }
}

if (!response.ok) {
  const errMessage: APIError = await response.json();
  throw new ApiError(errMessage.code, errMessage.message, errMessage.fieldErrors);
}"""

    total_count = """if (params.totalCount) {
  options.headers = {
    ...options.headers,
    'Collection-Total': 'include',
  };
}"""

    format_filter_value = """if (value instanceof Date) {
  return value.toISOString();
}
if (Array.isArray(value)) {
  return value.map((v) => (v instanceof Date ? v.toISOString() : String(v))).join(',');
}
return String(value);"""

    sort = """if ({access} !== undefined && {access} !== null) {{
  queryString.append({wire}, {access}.map((v) => v.replace(/([A-Z])/g, '_$1').toLowerCase()).join(','));
}}"""

    include = """if ({access}) {{
  queryString.append({wire}, {access}.map((v) => {{
    // First handle path segments with dots
    return v.split('.').map((segment) => {{
      // Convert camelCase or PascalCase to snake_case
      return segment.replace(/([a-z])([A-Z])/g, '$1_$2').toLowerCase();
    }}).join('.');
  }}).join(','));
}}"""
